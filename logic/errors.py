"""Exceptions raised while building a door shuffle.

Every error here is fatal for the run. Nothing in the randomizer retries or
produces partial output once one of these has been raised.
"""


class RandomizerError(Exception):
  """Base class for all randomizer failures."""
  pass


class RecordFormatError(RandomizerError, ValueError):
  """Raised when a door or room record cannot be parsed into its typed form."""
  pass


class ReferentialError(RandomizerError):
  """Raised when records reference doors that don't exist or don't match."""
  pass


class UnknownDoorError(ReferentialError):
  """Raised when a door id is missing from the door table."""
  pass


class ConnectivityLookupError(ReferentialError):
  """Raised when the original connectivity index has no entry for a lookup."""
  pass


class TopologicalDeadlockError(RandomizerError):
  """Raised when no remaining room can be connected to the current exits."""
  pass


class MatchingCountError(RandomizerError):
  """Raised when leftover entrances and exits can't be paired up."""
  pass


class PatchBoundsError(RandomizerError):
  """Raised when a patch write falls outside of the loaded ROM image."""
  pass


class ShuffleValidationError(RandomizerError):
  """Raised when a finished shuffle fails validation."""
  pass

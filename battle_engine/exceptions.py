"""Error taxonomy for the bracket engine."""


class TournamentError(Exception):
    """Base class for tournament errors."""


class InvalidTransition(TournamentError):
    """A bracket mutation was rejected; the bracket is unchanged."""

    def __init__(self, message: str, *, round_number: int | None = None, match_number: int | None = None):
        super().__init__(message)
        self.round_number = round_number
        self.match_number = match_number


class MalformedRoster(TournamentError):
    """The roster cannot seed a bracket."""


class ExternalCollaboratorFailure(TournamentError):
    """A narration, persistence or presentation collaborator failed."""

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator

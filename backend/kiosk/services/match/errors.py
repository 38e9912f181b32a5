class MatchError(Exception):
    """Base class for recoverable match orchestration errors."""

    code = 'match_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class ConfigurationError(MatchError):
    """Game or session context cannot produce a valid round structure."""

    code = 'configuration_error'


class InvalidTransitionError(MatchError):
    """Action is not allowed in the current phase. State is left unchanged."""

    code = 'invalid_transition'


class InputValidationError(MatchError):
    """Pending score input was rejected and staged as 0."""

    code = 'invalid_input'

    def __init__(self, message: str, value: int = 0):
        super().__init__(message)
        self.value = value

    def to_dict(self):
        payload = super().to_dict()
        payload['value'] = self.value
        return payload

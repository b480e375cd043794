"""Exceptions raised across the study exam agent"""


class StudyAppError(Exception):
    """Base class for all application errors"""


class InputValidationError(StudyAppError):
    """User input rejected before any AI call is made (message is user-facing)"""


class AuthenticationRequiredError(StudyAppError):
    """No signed-in user identity is available"""


class GatewayError(StudyAppError):
    """The AI gateway failed: a fatal error, or every API key was exhausted"""


class GenerationError(StudyAppError):
    """Topic or question generation returned unusable output"""


class SessionStateError(StudyAppError):
    """A session transition was requested in a state that does not allow it"""

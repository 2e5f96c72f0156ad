"""
Usage errors for the coordination layer
Raised only for wiring bugs; capacity and validation outcomes are return values.
"""

from typing import Optional


class CoordinatorUsageError(Exception):
    """Raised when a coordinator is used in a way that indicates a wiring bug"""

    def __init__(self, component: str, message: str):
        self.component = component
        super().__init__(f"{component}: {message}")


class CoordinatorNotInitializedError(CoordinatorUsageError):
    """Raised when a coordinator is used before init() or after dispose()"""

    def __init__(self, component: str, state: Optional[str] = None):
        self.state = state or "uninitialized"
        super().__init__(component, f"coordinator is {self.state}; call init() first")


class MissingCollaboratorError(CoordinatorUsageError):
    """Raised when a required collaborator was not injected"""

    def __init__(self, component: str, collaborator: str):
        self.collaborator = collaborator
        super().__init__(component, f"requires a {collaborator} but none was provided")

"""Exceptions raised by the matching service, AI client and repository."""


class FreelanceMatchError(Exception):
    """Base class for freelancematch errors."""
    pass


class FreelancerNotFoundError(FreelanceMatchError):
    """Raised when a freelancer id does not exist in storage."""

    def __init__(self, freelancer_id):
        self.freelancer_id = freelancer_id
        super().__init__(f"Freelancer with ID {freelancer_id} not found.")


class NoFreelancersError(FreelanceMatchError):
    """Raised when matching is requested against an empty freelancer store."""
    pass


class LLMError(FreelanceMatchError):
    """Raised when the external AI service cannot produce a reply."""

    def __init__(self, message: str, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class LLMResponseError(LLMError):
    """Raised when the AI reply does not contain the expected JSON."""
    pass

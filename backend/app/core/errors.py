"""Domain errors raised by the review-request pipeline.

Each carries the HTTP status the API answers with; the handler in
``app.main`` turns them into ``{"message": ...}`` JSON.
"""


class ReviewPipelineError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingContactInfo(ReviewPipelineError):
    status_code = 400

    def __init__(self, message: str = "Review request lacks contact information (email or phone)"):
        super().__init__(message)


class ProviderDeliveryFailure(ReviewPipelineError):
    status_code = 502

    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider} delivery failed: {detail}")
        self.provider = provider
        self.detail = detail


class NotFound(ReviewPipelineError):
    status_code = 404


class Forbidden(ReviewPipelineError):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class AlreadyDispatched(ReviewPipelineError):
    status_code = 409

    def __init__(self, request_id: int):
        super().__init__(f"Review request {request_id} has already been sent or is being sent")
        self.request_id = request_id

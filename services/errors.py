"""Domain errors raised by the messaging services.

Routes translate these into HTTP responses; the live channel turns them into
``error`` events.
"""


class MessagingError(Exception):
	status_code = 500

	def __init__(self, detail: str):
		super().__init__(detail)
		self.detail = detail


class ValidationError(MessagingError):
	status_code = 400


class Unauthorized(MessagingError):
	status_code = 403


class NotFound(MessagingError):
	status_code = 404

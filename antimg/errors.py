"""Domain errors for user handling."""


class AntimgError(Exception):
    """Base class for application errors."""

    message = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.message if message is None else message)


class UserNotFoundError(AntimgError):
    message = "用户不存在"


class UserExistsError(AntimgError):
    message = "用户已存在"


class InvalidCredentialsError(AntimgError):
    message = "用户名或密码错误"
"""业务异常"""
from fastapi import HTTPException, status


class ToolLocationError(ValueError):
    """工具既没有站内路径也没有外部链接"""

    def __init__(self, tool_name: str = None):
        label = f"'{tool_name}'" if tool_name else "tool"
        super().__init__(f"Either path or external_url is required for {label}")


class CustomException(HTTPException):
    """Base class for custom exceptions."""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)


class ToolNotFoundError(CustomException):
    def __init__(self, tool_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Tool {tool_id} not found",
        )


class UsageNotFoundError(CustomException):
    def __init__(self, usage_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Usage record {usage_id} not found",
        )


class ReviewNotFoundError(CustomException):
    def __init__(self, review_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Review {review_id} not found",
        )


class UserNotFoundError(CustomException):
    def __init__(self, user_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )


class UserAlreadyExistsError(CustomException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )


class DuplicateReviewError(CustomException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already reviewed this tool",
        )


class AuthenticationRequiredError(CustomException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )


class AdminRequiredError(CustomException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )


class NotReviewOwnerError(CustomException):
    def __init__(self, review_id: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not allowed to modify review {review_id}",
        )

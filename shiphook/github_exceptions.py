from typing import Optional, Union


class GithubError(Exception):
    pass


class GithubConfigurationError(GithubError):
    pass


class GithubApiError(GithubError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GithubRateLimitError(GithubApiError):
    def __init__(self, message: str, retry_after: Union[int, float, None] = None):
        super().__init__(message, status_code=403)
        self.retry_after = retry_after

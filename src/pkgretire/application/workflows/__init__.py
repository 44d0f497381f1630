from .retire_package import NOT_OWNER_MESSAGE, TEAM_MEMBER_MESSAGE, RetirementExecutor

__all__ = ["NOT_OWNER_MESSAGE", "TEAM_MEMBER_MESSAGE", "RetirementExecutor"]

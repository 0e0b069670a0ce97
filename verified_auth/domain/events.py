from enum import Enum
from typing import TypedDict


class EmailPassVerifiedEvents(str, Enum):
    CODE_GENERATED = "emailpass_auth.code_generated"


class CodeGeneratedEventData(TypedDict):
    email: str
    code: str
    callbackUrl: str

"""
# `grocer/schemas/user.py` — User Profile Schemas

## Overview
Profiles live in the `users` table, keyed by the Firebase UID. Registration distinguishes students (delivered
to a hostel on campus) from non-students (delivered to a street address).
`userType` is the discriminator.

---

## Common fields
| Field       | Type  | Required | Notes |
|-------------|-------|----------|-------|
| firstName   | `str` | ✔ | ≥ 2 characters |
| lastName    | `str` | ✔ | ≥ 2 characters |
| phoneNumber | `str` | ✔ | ≥ 10 characters |
| email       | `EmailStr` | ✖ | Filled from the auth token when missing |
| latitude    | `float` | ✖ | −90…90, from the location picker |
| longitude   | `float` | ✖ | −180…180 |

## `StudentProfileCreate` (`userType="student"`)
| Field      | Required |
|------------|----------|
| university | ✔ |
| hostel     | ✔ |
| block      | ✖ |
| room       | ✖ |

## `NonStudentProfileCreate` (`userType="non-student"`)
| Field    | Required | Notes |
|----------|----------|-------|
| address  | ✔ | ≥ 5 characters |
| township | ✔ | |
| landmark | ✖ | |
| city     | ✖ | defaults to "Lusaka" |

---

## `RegisterRequest`
Profile fields plus `email` + `password` (≥ 6) for server-side account creation.
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, StringConstraints

NameStr = Annotated[str, StringConstraints(min_length=2, strip_whitespace=True)]
PhoneStr = Annotated[str, StringConstraints(min_length=10, strip_whitespace=True)]

UNIVERSITIES: List[str] = [
    "University of Zambia (UNZA)",
    "Apex Medical University",
    "University of Lusaka (UNILUS)",
    "Levy Mwanawasa Medical University",
    "National Institute of Public Administration (NIPA)",
    "ZCAS University",
    "Other",
]

DEFAULT_CITY = "Lusaka"


class _ProfileBase(BaseModel):
    firstName: NameStr
    lastName: NameStr
    phoneNumber: PhoneStr
    email: Optional[EmailStr] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @property
    def username(self) -> str:
        return f"{self.firstName} {self.lastName}".strip()


class StudentProfileCreate(_ProfileBase):
    userType: Literal["student"] = "student"
    university: str = Field(..., min_length=1)
    hostel: str = Field(..., min_length=1)
    block: Optional[str] = None
    room: Optional[str] = None


class NonStudentProfileCreate(_ProfileBase):
    userType: Literal["non-student"] = "non-student"
    address: str = Field(..., min_length=5)
    township: str = Field(..., min_length=1)
    landmark: Optional[str] = None
    city: str = DEFAULT_CITY


ProfileCreate = Annotated[
    Union[StudentProfileCreate, NonStudentProfileCreate],
    Field(discriminator="userType"),
]


class _Credentials(BaseModel):
    email: EmailStr
    password: Annotated[str, Field(min_length=6)]


class StudentRegister(StudentProfileCreate, _Credentials):
    email: EmailStr


class NonStudentRegister(NonStudentProfileCreate, _Credentials):
    email: EmailStr


RegisterRequest = Annotated[
    Union[StudentRegister, NonStudentRegister],
    Field(discriminator="userType"),
]


class UserProfile(BaseModel):
    """Profile as read back from the `users` table."""
    id: Optional[str] = None
    username: str = ""
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phoneNumber: str = ""
    userType: Literal["student", "non-student"] = "student"
    university: Optional[str] = None
    hostel: Optional[str] = None
    block: Optional[str] = None
    room: Optional[str] = None
    address: Optional[str] = None
    landmark: Optional[str] = None
    township: Optional[str] = None
    city: Optional[str] = DEFAULT_CITY
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    createdAt: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: Annotated[str, Field(min_length=6)]


class LoginResponse(BaseModel):
    id_token: str
    refresh_token: str
    expires_in: int  # seconds
    user_id: str


class RegisterResponse(LoginResponse):
    """Tokens of the new account plus its stored profile."""
    user: UserProfile

from enum import Enum
from typing import List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON form uses camelCase keys (storage and API)."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


Currency = Literal["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "INR"]


# --- Users ---


class UserRecord(CamelModel):
    id: str
    name: str
    email: str
    password: str


class PublicUser(CamelModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_record(cls, record: UserRecord) -> "PublicUser":
        return cls(id=record.id, name=record.name, email=record.email)


class LoginForm(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)


class RegisterForm(CamelModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str = Field(min_length=6)

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterForm":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match.")
        return self


class ProfileEditForm(CamelModel):
    name: str = Field(min_length=2, max_length=100)


class ChangePasswordForm(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
    confirm_new_password: str = Field(min_length=6)

    @model_validator(mode="after")
    def new_passwords_match(self) -> "ChangePasswordForm":
        if self.new_password != self.confirm_new_password:
            raise ValueError("New passwords don't match.")
        return self


# --- Itineraries ---


class ItineraryInput(CamelModel):
    """Trip preferences submitted from the planning form."""

    destination: str = Field(min_length=3, max_length=100)
    interests: str = Field(min_length=5, max_length=500)
    currency: Currency
    budget_amount: float = Field(gt=0, le=1_000_000)
    duration: int = Field(ge=1, le=90)


class ItineraryDraft(CamelModel):
    """An itinerary about to be saved; id and date are assigned on save."""

    destination: str
    content: str
    currency: Optional[str] = None
    budget_amount: Optional[float] = None
    duration: Optional[int] = None
    interests: Optional[str] = None


class ItineraryRecord(ItineraryDraft):
    id: str
    generated_date: str

    def to_draft(self, content: Optional[str] = None) -> ItineraryDraft:
        data = self.model_dump(exclude={"id", "generated_date"})
        if content is not None:
            data["content"] = content
        return ItineraryDraft(**data)


# --- Chat ---


class ChatMessage(CamelModel):
    role: Literal["user", "model"]
    content: str


# --- Segmented view ---


class IconTag(str, Enum):
    OVERVIEW = "overview"
    CALENDAR = "calendar"
    ATTRACTIONS = "attractions"
    FOOD = "food"
    HOTEL = "hotel"
    TIPS = "tips"
    TRANSPORTATION = "transportation"


class Section(CamelModel):
    title: str
    icon_tag: IconTag
    content: List[str] = Field(default_factory=list)
    is_day_section: bool = False


class RenderedSection(CamelModel):
    title: str
    icon_tag: IconTag
    is_day_section: bool = False
    paragraphs: List[str] = Field(default_factory=list)
    bullets: List[str] = Field(default_factory=list)


# --- AI boundary ---


class GenerateItineraryOutput(BaseModel):
    itinerary: str


class RefineItineraryRequest(CamelModel):
    existing_itinerary: str = Field(min_length=1)
    user_feedback: str = Field(min_length=10, max_length=1000)


class RefineItineraryOutput(CamelModel):
    refined_itinerary: str


class ItineraryChatInput(CamelModel):
    itinerary_content: str
    destination: str
    chat_history: List[ChatMessage] = Field(default_factory=list)
    user_message: str


class ItineraryChatOutput(BaseModel):
    response: str


class SuggestInterestsInput(CamelModel):
    query: str
    existing_interests: Optional[str] = None


class SuggestInterestsOutput(BaseModel):
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("suggestions")
    @classmethod
    def strip_blank(cls, v: List[str]) -> List[str]:
        return [s.strip() for s in v if s and s.strip()]

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator


class _InquiryBase(BaseModel):
    name: str = Field(min_length=2, description="Name must be at least 2 characters")
    email: EmailStr
    message: str = Field(min_length=10, description="Message must be at least 10 characters")

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", "message", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ContactRequest(_InquiryBase):
    subject: str = Field(min_length=2, description="Subject must be at least 2 characters")

    @field_validator("subject", mode="before")
    @classmethod
    def strip_subject(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class PrintInquiryRequest(_InquiryBase):
    photo_id: str | None = Field(
        default=None, validation_alias=AliasChoices("photoId", "photo_id")
    )
    photo_title: str | None = Field(
        default=None, validation_alias=AliasChoices("photoTitle", "photo_title")
    )

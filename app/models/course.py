from pydantic import BaseModel, ConfigDict, Field


class Course(BaseModel):
    """Course as the rest of EduSource stores it; this service only reads it and grows ``enrolledUsers``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    title: str | None = None
    price: int | float | None = None  # paise, passed through as stored
    currency: str | None = None
    enrolled_users: list[str] = Field(default_factory=list, alias="enrolledUsers")

    def is_enrolled(self, user_id: str) -> bool:
        return user_id in self.enrolled_users

from pydantic import BaseModel, ConfigDict, Field


class LoginCommand(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    argv: list[str] = Field(min_length=1)

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def arguments(self) -> list[str]:
        return self.argv[1:]

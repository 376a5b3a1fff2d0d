from pydantic import BaseModel, ConfigDict


class VerifierConfig(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    sudo: bool = False


class ShellVerifierConfig(VerifierConfig):
    setup_command: str | None = None
    sync_command: str | None = None
    run_command: str | None = None

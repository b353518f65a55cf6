from pydantic import BaseModel, ConfigDict


class PatchPayload(BaseModel):
    """Wire body of one forwarded block (``POST /api/diff``)."""

    file_path: str
    search_content: str
    replace_content: str


class BlockRecord(BaseModel):
    """One well-formed block found in a text snapshot."""

    model_config = ConfigDict(frozen=True)

    file_path: str  # trimmed
    search_content: str  # inner whitespace preserved
    replace_content: str  # inner whitespace preserved
    raw_span: str  # full matched text, START marker through END marker

    def to_payload(self) -> PatchPayload:
        return PatchPayload(
            file_path=self.file_path,
            search_content=self.search_content,
            replace_content=self.replace_content,
        )

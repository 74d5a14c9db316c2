"""Wire messages for the grid slice WebSocket protocol.

Every frame is a JSON object with a ``type`` discriminator and lowerCamelCase
fields:

    Client -> Server
        metadata_request   {"type": "metadata_request"}
        slice_request      viewport description, see SliceRequest

    Server -> Client
        metadata_response  grid bounds
        slice_response     window, column letters and cell text
        error              {"type": "error", "message": "..."}

Integer fields are strict: booleans, floats and numeric strings are rejected
rather than coerced. Unknown fields are ignored.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter
from pydantic.alias_generators import to_camel

from gridslice.config import GridBounds
from gridslice.engine import SliceResult, Viewport
from gridslice.errors import GridSliceError, ValidationError

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

UInt32 = Annotated[StrictInt, Field(ge=0, le=U32_MAX)]
PositiveUInt32 = Annotated[StrictInt, Field(gt=0, le=U32_MAX)]
UInt64 = Annotated[StrictInt, Field(ge=0, le=U64_MAX)]


class WireModel(BaseModel):
    """Base for every message: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json(self) -> str:
        """Serialize to a compact JSON text frame.

        Field order is fixed by the model, so equal messages always encode to
        identical bytes.
        """
        return self.model_dump_json(by_alias=True, exclude_none=True)


class MetadataRequest(WireModel):
    """Request for the grid bounds."""

    type: Literal["metadata_request"] = "metadata_request"


class SliceRequest(WireModel):
    """Viewport description sent whenever the client scrolls or resizes."""

    type: Literal["slice_request"] = "slice_request"
    screen_width: UInt32
    screen_height: UInt32
    horizontal_buffer: UInt32
    vertical_buffer: UInt32
    default_column_width: PositiveUInt32
    default_row_height: PositiveUInt32
    scroll_left: UInt64
    scroll_top: UInt64

    def to_viewport(self) -> Viewport:
        return Viewport(
            screen_width=self.screen_width,
            screen_height=self.screen_height,
            horizontal_buffer=self.horizontal_buffer,
            vertical_buffer=self.vertical_buffer,
            default_column_width=self.default_column_width,
            default_row_height=self.default_row_height,
            scroll_left=self.scroll_left,
            scroll_top=self.scroll_top,
        )


ClientMessage = Annotated[MetadataRequest | SliceRequest, Field(discriminator="type")]

# One validation pass: the "type" tag picks the model, then its fields are checked
CLIENT_MESSAGE_ADAPTER: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


class MetadataResponse(WireModel):
    """Grid bounds."""

    type: Literal["metadata_response"] = "metadata_response"
    max_rows: int
    max_cols: int

    @classmethod
    def from_bounds(cls, bounds: GridBounds) -> MetadataResponse:
        return cls(max_rows=bounds.max_rows, max_cols=bounds.max_cols)


class SliceResponse(WireModel):
    """A full slice: window position, column letters and every cell."""

    type: Literal["slice_response"] = "slice_response"
    start_row: int
    row_count: int
    start_col: int
    col_count: int
    col_letters: list[str]
    cells_by_row: list[list[str]]

    @classmethod
    def from_result(cls, result: SliceResult) -> SliceResponse:
        window = result.window
        # Cells were produced by the engine; skip re-validating 200k strings
        return cls.model_construct(
            start_row=window.start_row,
            row_count=window.row_count,
            start_col=window.start_col,
            col_count=window.col_count,
            col_letters=result.col_letters,
            cells_by_row=result.cells_by_row,
        )


class FieldError(BaseModel):
    """One failing field of a bad request."""

    field: str
    message: str
    kind: str


class ErrorResponse(WireModel):
    """Error reply. ``errors`` is present only for bad requests."""

    type: Literal["error"] = "error"
    message: str
    errors: list[FieldError] | None = None

    @classmethod
    def from_error(cls, error: GridSliceError) -> ErrorResponse:
        field_errors = None
        if isinstance(error, ValidationError) and error.field_errors:
            field_errors = [FieldError(**entry) for entry in error.field_errors]
        return cls(message=error.message, errors=field_errors)


ServerMessage = MetadataResponse | SliceResponse | ErrorResponse

# tool calling declarations for the assistant's device actions and document retrieval

from mini_assistant.common.types.tool_declaration_types import ToolDeclaration, ToolParameter, ToolParamType

# =====================================================================
# Device actions
# =====================================================================

create_call_declaration = ToolDeclaration(
    name="create_call",
    description="Dial and place a phone call.",
    parameters=(
        ToolParameter(name="tel", type=ToolParamType.STRING, description="Phone number to call, e.g. '+84901234567'."),
    ),
    required=frozenset({"tel"}),
)

create_email_declaration = ToolDeclaration(
    name="create_email",
    description="Draft an email in the user's mail app, ready for the user to review and send.",
    parameters=(
        ToolParameter(name="to", type=ToolParamType.STRING, description="Email address of the recipient."),
        ToolParameter(name="subject", type=ToolParamType.STRING, description="Subject of the email."),
        ToolParameter(name="body", type=ToolParamType.STRING, description="Body of the email."),
    ),
    required=frozenset({"to", "subject", "body"}),
)

create_calendar_event_declaration = ToolDeclaration(
    name="create_calendar_event",
    description="Create a calendar event.",
    parameters=(
        ToolParameter(name="title", type=ToolParamType.STRING, description="Title of the event."),
        ToolParameter(name="description", type=ToolParamType.STRING, description="Description of the event."),
        ToolParameter(name="address", type=ToolParamType.STRING, description="Location of the event."),
        ToolParameter(
            name="start",
            type=ToolParamType.STRING,
            description='Start time as a JSON string. Example: {"year":2025,"month":9,"day":7,"hour":14,"minute":0}. Month is 0-based (0 = Jan, 11 = Dec).',
        ),
        ToolParameter(
            name="end",
            type=ToolParamType.STRING,
            description='End time as a JSON string. Example: {"year":2025,"month":9,"day":7,"hour":15,"minute":0}. Month is 0-based (0 = Jan, 11 = Dec).',
        ),
        ToolParameter(
            name="attendees",
            type=ToolParamType.STRING,
            description='Comma-separated attendee emails. Example: "alice@example.com,bob@example.com".',
        ),
    ),
    required=frozenset({"title", "start", "end"}),
)

create_note_declaration = ToolDeclaration(
    name="create_note",
    description="Create a note in Google Keep.",
    parameters=(
        ToolParameter(name="title", type=ToolParamType.STRING, description="Title of the note."),
        ToolParameter(name="body", type=ToolParamType.STRING, description="Body of the note."),
    ),
    required=frozenset({"title", "body"}),
)

# =====================================================================
# Document retrieval
# =====================================================================

retrieve_documents_declaration = ToolDeclaration(
    name="retrieve_documents",
    description="Retrieve passages from the documents the user has uploaded.",
    parameters=(
        ToolParameter(name="query", type=ToolParamType.STRING, description="User query to retrieve passages with."),
        ToolParameter(name="top_k", type=ToolParamType.INTEGER, description="Number of passages to retrieve (1-20). Defaults to 5."),
    ),
    required=frozenset({"query"}),
)

assistant_tool_declarations: list[ToolDeclaration] = [
    create_call_declaration,
    retrieve_documents_declaration,
    create_email_declaration,
    create_calendar_event_declaration,
    create_note_declaration,
]

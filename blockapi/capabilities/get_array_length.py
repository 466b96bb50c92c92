import json

from blockapi.modules.capability import Block, Capability


def handle(context):
    # Already parsed and checked to be an array by the validation stage
    return len(context.inputs["array"])


get_array_length = Capability(
    block=Block(
        opcode="getArrayLength",
        kind="reporter",
        text="length of array [array]",
        schema={
            "array": {
                "type": "json",
                "schema": {"type": "array", "items": {}},
                "default": json.dumps(
                    ["Launch Project", "Review Emails", "Brainstorm Ideas", "Complete Tasks", "Set Goals"]
                ),
                "description": "JSON array",
            },
        },
    ),
    handler=handle,
    auth_required=False,
)

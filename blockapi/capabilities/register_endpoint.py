from blockapi.capabilities.common import require_services
from blockapi.modules.api import RegistrationResult
from blockapi.modules.capability import Block, Capability

SAMPLE_SOURCE = '''from blockapi.modules.capability import Block, Capability


def handle(context):
    return {"success": True}


my_endpoint = Capability(
    block=Block(opcode="myEndpoint", kind="command", text="my endpoint"),
    handler=handle,
)
'''


async def handle(context):
    loader = require_services(context).loader
    result = await loader.register_source(context.inputs["source"], request_id=context.request_id)
    return RegistrationResult(**result.to_dict()).model_dump(exclude_none=True)


register_endpoint = Capability(
    block=Block(
        opcode="registerEndpoint",
        kind="command",
        text="register endpoint from Python source [source]",
        schema={
            "source": {
                "type": "string",
                "default": SAMPLE_SOURCE,
                "description": "Python source code exporting a Capability",
            },
        },
    ),
    handler=handle,
)

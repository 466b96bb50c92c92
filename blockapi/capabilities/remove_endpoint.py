from blockapi.capabilities.common import require_services
from blockapi.modules.api import RemovalResult
from blockapi.modules.capability import Block, Capability, RequestValidationError


async def handle(context):
    services = require_services(context)
    opcode = context.inputs["opcode"].strip()
    if not opcode:
        raise RequestValidationError("opcode", "The root endpoint cannot be removed")

    removed = services.registry.remove(opcode)
    if removed and services.audit is not None:
        await services.audit.record(
            "endpoint_removed", {"opcode": opcode}, request_id=context.request_id
        )
    return RemovalResult(success=True, opcode=opcode, removed=removed)


remove_endpoint = Capability(
    block=Block(
        opcode="removeEndpoint",
        kind="command",
        text="remove endpoint [opcode]",
        schema={"opcode": {"type": "string", "description": "Opcode of the endpoint to remove"}},
    ),
    handler=handle,
)

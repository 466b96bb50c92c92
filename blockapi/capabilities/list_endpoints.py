from blockapi.capabilities.common import endpoint_entries, require_services
from blockapi.modules.api import EndpointInfo
from blockapi.modules.capability import Block, Capability


def handle(context):
    registry = require_services(context).registry
    return [EndpointInfo.model_validate(entry) for entry in endpoint_entries(registry)]


list_endpoints = Capability(
    block=Block(opcode="listEndpoints", kind="reporter", text="list all endpoints"),
    handler=handle,
    auth_required=False,
)

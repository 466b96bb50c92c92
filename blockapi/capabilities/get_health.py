from blockapi.capabilities.common import require_services
from blockapi.modules.api import HealthResponse
from blockapi.modules.capability import Block, Capability


def handle(context):
    services = require_services(context)
    return HealthResponse(
        endpoints=len(services.registry),
        modules=sorted(services.enabled_modules),
        version=services.version,
    )


get_health = Capability(
    block=Block(opcode="getHealth", kind="reporter", text="system health status"),
    handler=handle,
    auth_required=False,
)

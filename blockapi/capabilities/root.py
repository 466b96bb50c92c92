from blockapi.capabilities.common import endpoint_entries, render_index, require_services
from blockapi.modules.capability import Block, Capability, RawResponse


def handle(context):
    services = require_services(context)
    page = render_index(endpoint_entries(services.registry), services.version)
    return RawResponse(body=page, media_type="text/html")


root = Capability(
    block=Block(opcode="", kind="reporter", text="index page"),
    handler=handle,
    auth_required=False,
)

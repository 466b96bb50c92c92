from blockapi.modules.capability import Block, Capability


def handle(context):
    return context.user_email or "Unknown"


get_user = Capability(
    block=Block(opcode="getUser", kind="reporter", text="current user email"),
    handler=handle,
)

"""Mention prefixes for delivered questions and polls."""

from models.domain import MentionKind, MentionPolicy

EVERYONE_MENTION = "@everyone"
# Discord role mention syntax
ROLE_MENTION_TEMPLATE = "<@&{role_id}>"


def format_ping(
    policy: MentionPolicy, body: str, role_template: str = ROLE_MENTION_TEMPLATE
) -> str:
    """Prefix ``body`` with the mention the policy asks for.

    The role is not checked here; it was checked when the policy was set.

    Args:
        policy: The guild's mention policy.
        body: The message text.
        role_template: Format string for a role mention, with a ``role_id``
            placeholder.

    Returns:
        The outgoing message text.
    """
    if policy.kind is MentionKind.EVERYONE:
        return f"{EVERYONE_MENTION} {body}"
    if policy.kind is MentionKind.ROLE:
        return f"{role_template.format(role_id=policy.role_id)} {body}"
    return body


def describe_policy(
    policy: MentionPolicy, role_template: str = ROLE_MENTION_TEMPLATE
) -> str:
    """Render a policy the way the ``ping_role`` command accepts it."""
    if policy.kind is MentionKind.EVERYONE:
        return "1"
    if policy.kind is MentionKind.ROLE:
        return role_template.format(role_id=policy.role_id)
    return "0"

"""
Row level security policy generation and reconciliation.
"""

import logging
import re
from typing import List, Optional, Tuple, Union

from tenjin_core.lib.schema import Policy, PolicyAction, PolicyOptions, Schema, Table
from tenjin_core.lib.sql import escape_string

STORAGE_OBJECTS = "storage.objects"

# Role sentinels that map to no TO clause
_UNRESTRICTED_ROLES = ("all",)


def generate_policy_name(table_name: str, action: PolicyAction, description: str) -> str:
    """
    Derive a policy name: <table>_<action>_<first three words of description>.

    Words are lowercased and stripped of anything that is not a letter,
    digit or whitespace before being taken.
    """
    sanitized = re.sub(r'[^a-z0-9\s]', '', description.lower())
    words = "_".join(sanitized.split()[:3])
    return f"{table_name}_{action.value}_{words}"


def resolve_policy_name(table_name: str, policy: Policy) -> str:
    return policy.options.name or generate_policy_name(table_name, policy.action, policy.description)


def format_action(action: PolicyAction) -> str:
    return "ALL" if action is PolicyAction.ALL else action.value.upper()


def format_role_clause(roles: Optional[Union[str, List[str]]]) -> str:
    if roles is None:
        return ""
    if isinstance(roles, (list, tuple)):
        # "all" anywhere in the list means no role restriction
        if not roles or any(role in _UNRESTRICTED_ROLES for role in roles):
            return ""
        return f"\n  TO {', '.join(str(role) for role in roles)}"
    if roles in _UNRESTRICTED_ROLES:
        return ""
    return f"\n  TO {roles}"


def format_policy_clauses(policy: Policy) -> Tuple[str, str]:
    """
    Select USING / WITH CHECK clauses for a policy's action.

    insert -> WITH CHECK only; select and delete -> USING only;
    update -> USING plus WITH CHECK when with_check is given;
    all -> USING and WITH CHECK on the same condition.
    """
    condition = policy.condition
    using = f"\n  USING ({condition})"
    with_check = f"\n  WITH CHECK ({condition})"

    if policy.action is PolicyAction.INSERT:
        return "", with_check
    if policy.action in (PolicyAction.SELECT, PolicyAction.DELETE):
        return using, ""
    if policy.action is PolicyAction.UPDATE:
        if policy.options.with_check:
            return using, f"\n  WITH CHECK ({policy.options.with_check})"
        return using, ""
    return using, with_check


def generate_policy(table_name: str, policy: Policy) -> str:
    """Render CREATE POLICY followed by its COMMENT ON POLICY."""
    name = resolve_policy_name(table_name, policy)
    using, with_check = format_policy_clauses(policy)
    role_clause = format_role_clause(policy.options.for_)

    return (
        f"CREATE POLICY {name} ON {table_name}\n"
        f"  FOR {format_action(policy.action)}{role_clause}{using}{with_check};\n"
        f"COMMENT ON POLICY {name} ON {table_name} IS {escape_string(policy.description)};"
    )


def generate_policies(table: Table) -> str:
    """Render all policies of a table in declaration order."""
    return "\n".join(generate_policy(table.name, policy) for policy in table.policies)


def storage_policy_name(bucket_name: str, policy: Policy) -> str:
    return policy.options.name or f"{bucket_name}_{policy.action.value}_policy"


def generate_storage_policy(bucket_name: str, policy: Policy) -> str:
    """
    Render a policy on storage.objects scoped to one bucket.

    The condition is always placed in USING and prefixed with a bucket_id match.
    """
    name = storage_policy_name(bucket_name, policy)
    role_clause = format_role_clause(policy.options.for_)

    return (
        f"CREATE POLICY {name} ON {STORAGE_OBJECTS}\n"
        f"  FOR {format_action(policy.action)}{role_clause}\n"
        f"  USING (bucket_id = {escape_string(bucket_name)} AND {policy.condition});\n"
        f"COMMENT ON POLICY {name} ON {STORAGE_OBJECTS} IS {escape_string(policy.description)};"
    )


def drop_policy(table_name: str, policy_name: str) -> str:
    return f"DROP POLICY IF EXISTS {policy_name} ON {table_name};"


def drop_storage_policy(policy_name: str) -> str:
    return drop_policy(STORAGE_OBJECTS, policy_name)


def policies_different(old: Policy, new: Policy) -> bool:
    """Exact structural comparison of (action, condition, options)."""
    return (old.action, old.condition, old.options) != (new.action, new.condition, new.options)


def policy_changes(table_name: str, old_policies: List[Policy], new_policies: List[Policy]) -> List[str]:
    """
    Compute the statements that move a table from old_policies to new_policies.

    Policies are matched by resolved name. The result lists, in order:
    drops for policies that disappeared, drops for policies whose definition
    changed, then CREATE POLICY for new and changed policies in new-list order.
    """
    old_by_name = {}
    for policy in old_policies:
        old_by_name.setdefault(resolve_policy_name(table_name, policy), policy)
    new_names = {resolve_policy_name(table_name, policy) for policy in new_policies}

    drops = []
    for name in old_by_name:
        if name not in new_names:
            drops.append(drop_policy(table_name, name))

    recreate_drops = []
    creates = []
    for policy in new_policies:
        name = resolve_policy_name(table_name, policy)
        old = old_by_name.get(name)
        if old is None:
            creates.append(generate_policy(table_name, policy))
        elif policies_different(old, policy):
            recreate_drops.append(drop_policy(table_name, name))
            creates.append(generate_policy(table_name, policy))

    logging.debug(
        f"Policy changes for {table_name}: {len(drops)} dropped, "
        f"{len(recreate_drops)} recreated, {len(creates)} created"
    )
    return drops + recreate_drops + creates


def generate_policy_changes(table_name: str, old_policies: List[Policy], new_policies: List[Policy]) -> str:
    return "\n".join(policy_changes(table_name, old_policies, new_policies))


def diff_schema_policies(old: Schema, new: Schema) -> List[str]:
    """
    Reconcile policies across two versions of a schema.

    Tables are matched by name and visited in new-schema order; tables
    present only in the old schema have all their policies dropped.
    """
    statements = []
    for table in new.tables:
        previous = old.table(table.name)
        old_policies = previous.policies if previous is not None else []
        statements.extend(policy_changes(table.name, old_policies, table.policies))

    for table in old.tables:
        if new.table(table.name) is None:
            statements.extend(policy_changes(table.name, table.policies, []))
    return statements


def user_owns_record_policy(user_id_field: str = "user_id") -> Policy:
    """Policy restricting every action to rows owned by the current user."""
    return Policy(
        action=PolicyAction.ALL,
        description="Users can only access their own records",
        condition=f"auth.uid() = {user_id_field}",
    )


def public_read_policy() -> Policy:
    return Policy(action=PolicyAction.SELECT, description="Public read access", condition="true")


def authenticated_only_policy(actions=(PolicyAction.INSERT, PolicyAction.UPDATE, PolicyAction.DELETE)) -> List[Policy]:
    """One policy per action requiring an authenticated user."""
    if isinstance(actions, (str, PolicyAction)):
        actions = [actions]
    return [
        Policy(action=action, description="Authenticated users only", condition="auth.uid() IS NOT NULL")
        for action in actions
    ]


def owner_or_public_read_policy(owner_field: str, published_field: str = "published") -> List[Policy]:
    """Published rows readable by everyone, and owners can read their own rows."""
    return [
        Policy(
            action=PolicyAction.SELECT,
            description="Public can read published records",
            condition=f"{published_field} = true",
        ),
        Policy(
            action=PolicyAction.SELECT,
            description="Owners can read their own records",
            condition=f"auth.uid() = {owner_field}",
            options=PolicyOptions(for_="authenticated"),
        ),
    ]

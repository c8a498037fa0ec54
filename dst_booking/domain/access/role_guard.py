"""Role guard - capability checks gating every workflow entry point

enterprise:
  - confirms sessions, staffs them (accept/reject operators)
  - completes and deletes missions
  - sees every session
operator:
  - browses the marketplace and applies to sessions
  - sees marketplace sessions and the ones it was accepted on
client:
  - requests sessions
  - sees only its own sessions

No authentication happens here: the role is trusted as given by the caller.
"""

import enum
import logging
from typing import Iterable, Optional, Union

from ...models import ApplicationStatus, SessionStatus, ShootingSession
from ...shared.envelope import ErrorCode, WorkflowError

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    CLIENT = "client"
    ENTERPRISE = "enterprise"
    OPERATOR = "operator"


class Action(str, enum.Enum):
    CREATE_SESSION_REQUEST = "create_session_request"
    CONFIRM_SESSION = "confirm_session"
    VIEW_MARKETPLACE = "view_marketplace"
    APPLY_TO_SESSION = "apply_to_session"
    ACCEPT_OPERATOR = "accept_operator"
    REJECT_OPERATOR = "reject_operator"
    COMPLETE_MISSION = "complete_mission"
    DELETE_MISSION = "delete_mission"
    VIEW_STAFFING = "view_staffing"
    VIEW_APPLICATIONS = "view_applications"
    VIEW_OFFER_USAGE = "view_offer_usage"
    VIEW_SESSIONS = "view_sessions"


PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.CLIENT: frozenset(
        {
            Action.CREATE_SESSION_REQUEST,
            Action.VIEW_OFFER_USAGE,
            Action.VIEW_SESSIONS,
        }
    ),
    Role.ENTERPRISE: frozenset(
        {
            Action.CONFIRM_SESSION,
            Action.ACCEPT_OPERATOR,
            Action.REJECT_OPERATOR,
            Action.COMPLETE_MISSION,
            Action.DELETE_MISSION,
            Action.VIEW_STAFFING,
            Action.VIEW_APPLICATIONS,
            Action.VIEW_OFFER_USAGE,
            Action.VIEW_SESSIONS,
        }
    ),
    Role.OPERATOR: frozenset(
        {
            Action.VIEW_MARKETPLACE,
            Action.APPLY_TO_SESSION,
            Action.VIEW_APPLICATIONS,
            Action.VIEW_SESSIONS,
        }
    ),
}


def check_permission_table(permissions: dict[Role, frozenset[Action]]) -> None:
    """Raise RuntimeError unless every role has an entry and every action is granted"""
    if set(permissions) != set(Role):
        raise RuntimeError(f"Permission table is missing roles: {set(Role) - set(permissions)}")
    granted = frozenset().union(*permissions.values())
    if granted != set(Action):
        raise RuntimeError(f"Actions granted to no role: {set(Action) - granted}")


check_permission_table(PERMISSIONS)


def parse_role(role: Union[Role, str, None]) -> Optional[Role]:
    """Return the Role for a role name, or None when it is unknown"""
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().lower())
    except ValueError:
        return None


def can_perform(role: Union[Role, str, None], action: Union[Action, str]) -> bool:
    """Pure predicate: may `role` perform `action`"""
    parsed = parse_role(role)
    if parsed is None:
        return False
    try:
        action = Action(action)
    except ValueError:
        return False
    return action in PERMISSIONS[parsed]


def is_marketplace_visible(session: Optional[ShootingSession]) -> bool:
    """Confirmed, flagged visible and equipped with at least one setup"""
    if session is None:
        return False
    if session.status != SessionStatus.CONFIRMED.value:
        return False
    if not session.marketplace_visible:
        return False
    return len(session.setup_ids or []) > 0


def _is_accepted_operator(session: ShootingSession, operator_id: Optional[str]) -> bool:
    if not operator_id:
        return False
    return any(
        app.operator_id == operator_id and app.status == ApplicationStatus.ACCEPTED.value
        for app in session.applications
    )


class RoleGuard:
    """Injectable wrapper around the permission table"""

    def can_perform(self, role: Union[Role, str, None], action: Union[Action, str]) -> bool:
        allowed = can_perform(role, action)
        if not allowed:
            logger.info(f"🚫 Role {role!r} denied action {getattr(action, 'value', action)}")
        return allowed

    def require(self, role: Union[Role, str, None], action: Action, details: str) -> Role:
        """Raise UNAUTHORIZED unless `role` may perform `action`"""
        if not self.can_perform(role, action):
            raise WorkflowError(ErrorCode.UNAUTHORIZED, details)
        return parse_role(role)

    def can_view_session(
        self,
        role: Union[Role, str, None],
        session: Optional[ShootingSession],
        linked_entity_id: Optional[str] = None,
    ) -> bool:
        """
        enterprise: always
        operator: marketplace sessions and sessions it was accepted on
        client: only sessions whose client_id is its own
        """
        parsed = parse_role(role)
        if parsed is None or session is None:
            return False

        if parsed is Role.ENTERPRISE:
            return True
        if parsed is Role.OPERATOR:
            return is_marketplace_visible(session) or _is_accepted_operator(
                session, linked_entity_id
            )
        return bool(linked_entity_id) and session.client_id == linked_entity_id

    def visible_sessions(
        self,
        role: Union[Role, str, None],
        sessions: Iterable[ShootingSession],
        linked_entity_id: Optional[str] = None,
    ) -> list[ShootingSession]:
        return [s for s in sessions if self.can_view_session(role, s, linked_entity_id)]

"""
Portfolio Access Engine Tests
Decision table, fail-closed roles and derived permissions
"""

import pytest

from portfolio.engines.access_engine import (
    auth_state_for,
    can_modify_comment,
    evaluate_access,
    get_permissions,
    normalize_requirement,
    normalize_role,
)
from portfolio.models import AccessOutcome, AccessRequirement, AuthState, Role


ALLOW = AccessOutcome.ALLOW
DENIED = AccessOutcome.DENIED

# role -> requirement -> outcome for a signed-in, loaded session
DECISION_TABLE = {
    "admin": {"none": ALLOW, "authenticated": ALLOW, "specialized": ALLOW, "admin": ALLOW},
    "specialized": {"none": ALLOW, "authenticated": ALLOW, "specialized": ALLOW, "admin": DENIED},
    "regular": {"none": ALLOW, "authenticated": ALLOW, "specialized": DENIED, "admin": DENIED},
}


def signed_in(role):
    return AuthState(is_loading=False, is_authenticated=True, role=role)


class TestDecisionTable:
    """Every role against every requirement"""

    @pytest.mark.parametrize("role", ["admin", "specialized", "regular"])
    @pytest.mark.parametrize("requirement", ["none", "authenticated", "specialized", "admin"])
    def test_signed_in_matrix(self, role, requirement):
        """Should match the role hierarchy exactly"""
        decision = evaluate_access(signed_in(role), requirement)
        assert decision.outcome == DECISION_TABLE[role][requirement]

    @pytest.mark.parametrize("requirement", ["authenticated", "specialized", "admin"])
    def test_anonymous_needs_login(self, requirement):
        """Should ask anonymous callers to log in for any protected view"""
        decision = evaluate_access(auth_state_for(None), requirement)
        assert decision.outcome == AccessOutcome.NEEDS_LOGIN
        assert decision.required_role is None

    def test_anonymous_public_view(self):
        """Should allow anonymous callers on unprotected views"""
        decision = evaluate_access(auth_state_for(None), "none")
        assert decision.outcome == ALLOW

    @pytest.mark.parametrize("requirement", ["none", "authenticated", "specialized", "admin"])
    def test_loading_short_circuits(self, requirement):
        """Should report loading before any other check, even for admins"""
        state = AuthState(is_loading=True, is_authenticated=True, role="admin")
        decision = evaluate_access(state, requirement)
        assert decision.outcome == AccessOutcome.LOADING
        assert decision.message is None

    def test_loading_while_anonymous(self):
        """Should not ask for login while the session is still resolving"""
        state = AuthState(is_loading=True, is_authenticated=False, role=None)
        assert evaluate_access(state, "admin").outcome == AccessOutcome.LOADING

    def test_deterministic(self):
        """Should return the same decision for the same inputs"""
        first = evaluate_access(signed_in("specialized"), "admin", "admin tools")
        second = evaluate_access(signed_in("specialized"), "admin", "admin tools")
        assert first == second


class TestDeniedDecisions:
    """Fallback copy and the role that would have been needed"""

    def test_admin_required_role(self):
        """Should name admin as the missing role"""
        decision = evaluate_access(signed_in("specialized"), AccessRequirement.ADMIN)
        assert decision.required_role == Role.ADMIN
        assert decision.title == "Access Denied"

    def test_specialized_required_role(self):
        """Should name specialized as the missing role"""
        decision = evaluate_access(signed_in("regular"), AccessRequirement.SPECIALIZED, "the hours dashboard")
        assert decision.required_role == Role.SPECIALIZED
        assert decision.title == "Specialized Access Required"
        assert "the hours dashboard" in decision.message

    def test_needs_login_copy(self):
        """Should mention the feature in the login prompt"""
        decision = evaluate_access(auth_state_for(None), "authenticated", "comments")
        assert decision.title == "Authentication Required"
        assert "comments" in decision.message

    def test_allow_has_no_copy(self):
        """Should not carry fallback copy when access is granted"""
        decision = evaluate_access(signed_in("admin"), "admin")
        assert decision.title is None
        assert decision.message is None


class TestFailClosed:
    """Missing or unknown roles never elevate"""

    @pytest.mark.parametrize("role", [None, "", "superuser", "42"])
    def test_unknown_role_is_regular_for_specialized(self, role):
        """Should deny specialized views to anything that isn't a known elevated role"""
        decision = evaluate_access(signed_in(role), "specialized")
        assert decision.outcome == DENIED
        assert decision.required_role == Role.SPECIALIZED

    def test_role_case_and_whitespace(self):
        """Should normalize stored role values before comparing"""
        decision = evaluate_access(signed_in(" ADMIN "), "admin")
        assert decision.outcome == ALLOW

    def test_signed_in_without_role(self):
        """Should still allow authenticated-only views"""
        decision = evaluate_access(signed_in(None), "authenticated")
        assert decision.outcome == ALLOW

    def test_normalize_role(self):
        assert normalize_role("admin") == Role.ADMIN
        assert normalize_role(Role.SPECIALIZED) == Role.SPECIALIZED
        assert normalize_role(None) == Role.REGULAR
        assert normalize_role("root") == Role.REGULAR

    def test_normalize_requirement(self):
        """Should treat a missing requirement as public and an unknown one as login-only"""
        assert normalize_requirement(None) == AccessRequirement.NONE
        assert normalize_requirement("Admin") == AccessRequirement.ADMIN
        assert normalize_requirement("vip") == AccessRequirement.AUTHENTICATED


class TestPermissions:
    """Capabilities derived from a role"""

    def test_admin_permissions(self):
        perms = get_permissions("admin")
        assert perms.is_admin
        assert perms.has_hours_access
        assert perms.can_comment
        assert perms.can_edit_content

    def test_specialized_permissions(self):
        perms = get_permissions("specialized")
        assert perms.is_specialized
        assert perms.has_hours_access
        assert perms.can_comment
        assert not perms.can_edit_content

    def test_regular_permissions(self):
        perms = get_permissions("regular")
        assert perms.is_regular
        assert not perms.has_hours_access
        assert not perms.can_comment
        assert not perms.can_edit_content

    def test_unknown_role_permissions(self):
        """Should grant nothing beyond regular"""
        assert get_permissions("owner") == get_permissions("regular")


class TestCommentOwnership:
    """Who may edit or delete a comment"""

    def test_author_can_modify(self, mock_specialized_user):
        comment = {"id": "c1", "user_id": mock_specialized_user["id"]}
        assert can_modify_comment(mock_specialized_user, comment)

    def test_other_user_cannot_modify(self, mock_specialized_user, mock_regular_user):
        comment = {"id": "c1", "user_id": mock_regular_user["id"]}
        assert not can_modify_comment(mock_specialized_user, comment)

    def test_admin_can_modify_any(self, mock_admin_user, mock_regular_user):
        comment = {"id": "c1", "user_id": mock_regular_user["id"]}
        assert can_modify_comment(mock_admin_user, comment)

    def test_demoted_author_cannot_modify(self, mock_regular_user):
        """Should refuse authors whose role no longer allows commenting"""
        comment = {"id": "c1", "user_id": mock_regular_user["id"]}
        assert not can_modify_comment(mock_regular_user, comment)

    def test_author_with_unknown_role_cannot_modify(self, mock_specialized_user):
        user = {**mock_specialized_user, "role": "moderator"}
        comment = {"id": "c1", "user_id": user["id"]}
        assert not can_modify_comment(user, comment)

    def test_anonymous_cannot_modify(self):
        assert not can_modify_comment(None, {"id": "c1", "user_id": "u1"})

    def test_missing_ids_do_not_match(self):
        """Should not treat two missing ids as the same author"""
        assert not can_modify_comment({"role": "regular"}, {"id": "c1"})


class TestAuthStateFor:
    """Session snapshots for resolved users"""

    def test_anonymous(self):
        state = auth_state_for(None)
        assert not state.is_authenticated
        assert not state.is_loading

    def test_user(self, mock_regular_user):
        state = auth_state_for(mock_regular_user)
        assert state.is_authenticated
        assert state.role == "regular"

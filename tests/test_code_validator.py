import pytest
from community_hub.extensions import db
from community_hub.services import code_validator, memberships
from community_hub.services.errors import InvalidCodeFormat, InvalidCode, InactiveCode
from conftest import make_user, make_community


class ExplodingSession:
    """Any store access fails the test."""
    def __getattr__(self, name):
        raise AssertionError(f"store touched: session.{name}")


@pytest.mark.parametrize("raw", ["ABC", "", "ABCDEFGHJ", "ABCD-234", "ÄBCDEFGH", None, 12345678])
def test_malformed_codes_fail_without_touching_the_store(raw):
    with pytest.raises(InvalidCodeFormat) as exc:
        code_validator.validate(ExplodingSession(), raw)
    assert exc.value.message == "Invalid invitation code format"


def test_normalize_trims_and_uppercases():
    assert code_validator.normalize_code("  abcd2345 \n") == "ABCD2345"
    assert code_validator.normalize_code(None) == ""


def test_unknown_well_formed_code_is_invalid(app):
    with app.app_context():
        with pytest.raises(InvalidCode) as exc:
            code_validator.validate(db.session, "NVALD234")
        assert exc.value.message == "Invitation code not found"


def test_deactivated_code_is_inactive(app):
    with app.app_context():
        community_id, _ = make_community()
        member_id = make_user("m@example.com")
        memberships.join_community(member_id, community_id)
        code = memberships.get_invitation_code(member_id, community_id).code
        memberships.leave_community(member_id, community_id)

        with pytest.raises(InactiveCode) as exc:
            code_validator.validate(db.session, code)
        assert exc.value.message == "Invitation code is no longer active"


def test_active_code_resolves_community_and_owner(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        code = memberships.get_invitation_code(organizer_id, community_id).code

        resolved = code_validator.validate(db.session, f" {code.lower()} ")
        assert resolved == code_validator.ResolvedCode(community_id=community_id, owner_user_id=organizer_id)

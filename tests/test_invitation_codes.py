import pytest
from community_hub.extensions import db
from community_hub.models import CommunityMembership, InvitationCode
from community_hub.services import invitation_codes, memberships
from community_hub.services.errors import CodeGenerationExhausted
from conftest import make_user, make_community


def test_generated_code_is_eight_unambiguous_chars(app):
    with app.app_context():
        code = invitation_codes.generate_code(db.session)
        assert len(code) == 8
        assert set(code) <= set(invitation_codes.CODE_ALPHABET)
        assert not set(code) & set("01IO")


def test_generate_code_retries_past_collisions(app, monkeypatch):
    with app.app_context():
        community_id, organizer_id = make_community()
        taken = memberships.get_invitation_code(organizer_id, community_id).code

        draws = iter([taken, taken, "FRESH234"])
        monkeypatch.setattr(invitation_codes, "_draw_code", lambda: next(draws))
        assert invitation_codes.generate_code(db.session) == "FRESH234"


def test_generate_code_gives_up_after_bounded_attempts(app, monkeypatch):
    with app.app_context():
        community_id, organizer_id = make_community()
        taken = memberships.get_invitation_code(organizer_id, community_id).code

        calls = []
        def always_taken():
            calls.append(1)
            return taken
        monkeypatch.setattr(invitation_codes, "_draw_code", always_taken)

        with pytest.raises(CodeGenerationExhausted) as exc:
            invitation_codes.generate_code(db.session)
        assert exc.value.message == "Failed to generate a unique invitation code"
        assert len(calls) == app.config["CODE_GENERATION_MAX_ATTEMPTS"] == 5


def test_deactivated_codes_still_count_as_taken(app, monkeypatch):
    with app.app_context():
        community_id, _ = make_community()
        member_id = make_user("m@example.com")
        memberships.join_community(member_id, community_id)
        old = memberships.get_invitation_code(member_id, community_id).code
        memberships.leave_community(member_id, community_id)

        monkeypatch.setattr(invitation_codes, "_draw_code", lambda: old)
        with pytest.raises(CodeGenerationExhausted):
            invitation_codes.generate_code(db.session, max_attempts=2)


def test_issue_code_is_idempotent_for_active_pair(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        first = invitation_codes.issue_code_for_membership(db.session, organizer_id, community_id)
        second = invitation_codes.issue_code_for_membership(db.session, organizer_id, community_id)
        assert first.code == second.code
        assert db.session.query(InvitationCode).filter_by(
            user_id=organizer_id, community_id=community_id
        ).count() == 1


def test_deactivate_code_is_a_noop_when_nothing_is_active(app):
    with app.app_context():
        community_id, _ = make_community()
        stranger_id = make_user("nobody@example.com")
        # nonexistent code: no error
        invitation_codes.deactivate_code(db.session, stranger_id, community_id)

        member_id = make_user("m@example.com")
        memberships.join_community(member_id, community_id)
        invitation_codes.deactivate_code(db.session, member_id, community_id)
        db.session.commit()
        # already inactive: still no error
        invitation_codes.deactivate_code(db.session, member_id, community_id)
        db.session.commit()

        row = db.session.query(InvitationCode).filter_by(user_id=member_id).one()
        assert row.is_active is False
        assert row.deactivated_at is not None


def test_lookup_distinguishes_absent_from_inactive(app):
    with app.app_context():
        community_id, _ = make_community()
        member_id = make_user("m@example.com")
        memberships.join_community(member_id, community_id)
        code = memberships.get_invitation_code(member_id, community_id).code
        memberships.leave_community(member_id, community_id)

        assert invitation_codes.lookup_by_code(db.session, "NVALD234") is None
        found = invitation_codes.lookup_by_code(db.session, code)
        assert found is not None
        assert found.is_active is False


def test_backfill_mints_codes_only_where_missing(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        member_id = make_user("m@example.com")
        memberships.join_community(member_id, community_id)
        organizer_code = memberships.get_invitation_code(organizer_id, community_id).code

        # simulate a membership that predates code issuance
        invitation_codes.deactivate_code(db.session, member_id, community_id)
        db.session.commit()

        assert invitation_codes.backfill_missing_codes(db.session) == 1
        db.session.commit()

        assert memberships.get_invitation_code(member_id, community_id).is_active is True
        assert memberships.get_invitation_code(organizer_id, community_id).code == organizer_code
        assert invitation_codes.backfill_missing_codes(db.session) == 0


def test_issue_retries_when_code_is_claimed_after_the_check(app, monkeypatch):
    # generate_code saw the code free, but another transaction inserted it first
    with app.app_context():
        community_id, organizer_id = make_community()
        taken = memberships.get_invitation_code(organizer_id, community_id).code
        member_id = make_user("m@example.com")
        # the competing row must come from the database, not this session's identity map
        db.session.expunge_all()

        draws = iter([taken, "LATE2345"])
        monkeypatch.setattr(invitation_codes, "generate_code", lambda session: next(draws))

        membership = memberships.join_community(member_id, community_id)
        assert membership.user_id == member_id
        assert memberships.get_invitation_code(member_id, community_id).code == "LATE2345"
        assert db.session.get(InvitationCode, taken).user_id == organizer_id


def test_issue_gives_up_when_every_insert_loses_the_race(app, monkeypatch):
    with app.app_context():
        community_id, organizer_id = make_community()
        taken = memberships.get_invitation_code(organizer_id, community_id).code
        member_id = make_user("m@example.com")
        db.session.expunge_all()

        monkeypatch.setattr(invitation_codes, "generate_code", lambda session: taken)

        with pytest.raises(CodeGenerationExhausted):
            memberships.join_community(member_id, community_id)
        # the membership insert was rolled back with the failed issuance
        assert db.session.query(CommunityMembership).filter_by(user_id=member_id).count() == 0

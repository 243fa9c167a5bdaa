import pytest
from sqlalchemy.exc import IntegrityError
from community_hub.extensions import db
from community_hub.models import CommunityMembership, InvitationCode
from community_hub.services import membership_store
from conftest import make_user, make_community


def test_membership_pair_is_unique(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        db.session.add(CommunityMembership(community_id=community_id, user_id=organizer_id, role="member"))
        with pytest.raises(IntegrityError) as exc:
            db.session.commit()
        db.session.rollback()
        assert membership_store.is_unique_violation(
            exc.value, membership_store.MEMBERSHIP_UNIQUE_CONSTRAINT, CommunityMembership.__tablename__
        )


def test_membership_role_is_checked(app):
    with app.app_context():
        community_id, _ = make_community()
        uid = make_user("m@example.com")
        db.session.add(CommunityMembership(community_id=community_id, user_id=uid, role="owner"))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()


def test_only_one_active_code_per_member(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        # organizer already holds an active code from community creation
        db.session.add(InvitationCode(code="SECOND23", user_id=organizer_id, community_id=community_id))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()

        db.session.add(InvitationCode(
            code="RETIRED2", user_id=organizer_id, community_id=community_id, is_active=False
        ))
        db.session.commit()
        assert db.session.query(InvitationCode).filter_by(user_id=organizer_id).count() == 2


def test_to_dict_shapes(app):
    with app.app_context():
        community_id, organizer_id = make_community()
        m = membership_store.find_membership(db.session, community_id=community_id, user_id=organizer_id)
        assert set(m.to_dict()) == {"community_id", "user_id", "role", "joined_at"}
        code = db.session.query(InvitationCode).filter_by(user_id=organizer_id).one()
        assert code.to_dict()["is_active"] is True

import pytest

from app.core.exceptions import ConflictException, ValidationException
from app.models.favorite_screening import FavoriteScreening
from app.models.social import Follow
from app.models.user import User
from app.models.user_entry import EntryLike, UserEntry
from app.services.account_service import AccountService, validate_nickname
from app.services.favorites_service import FavoriteScreeningService
from app.services.review_service import ReviewService
from app.services.social_service import SocialService
from app.services.user_entry_service import UserEntryService


@pytest.fixture
def service(db):
    return AccountService(db)


@pytest.mark.parametrize("nickname", ["ab", "한글닉네임", "dot.dash-under_1", " padded "])
def test_validate_nickname_accepts(nickname):
    assert validate_nickname(nickname) == nickname.strip()


@pytest.mark.parametrize(
    "nickname,code",
    [
        ("a", "INVALID_NICKNAME_LENGTH"),
        ("x" * 21, "INVALID_NICKNAME_LENGTH"),
        (None, "INVALID_NICKNAME_LENGTH"),
        ("no spaces", "INVALID_NICKNAME_CHARS"),
        ("emoji🎬", "INVALID_NICKNAME_CHARS"),
    ],
)
def test_validate_nickname_rejects(nickname, code):
    with pytest.raises(ValidationException) as exc_info:
        validate_nickname(nickname)
    assert exc_info.value.code == code


def test_me_reports_onboarding(service, test_user):
    me = service.me(test_user)
    assert me["email"] == test_user.email
    assert me["nickname"] == "viewer"
    assert me["needs_onboarding"] is True


def test_check_nickname(service, test_user, other_user):
    assert service.check_nickname(test_user, "fresh")["available"] is True
    # the user's own nickname is not "taken"
    assert service.check_nickname(test_user, "viewer")["available"] is True

    taken = service.check_nickname(test_user, "critic")
    assert taken == {"available": False, "message": "이미 사용 중인 닉네임입니다."}
    assert service.check_nickname(test_user, "a")["available"] is False


def test_update_nickname(db, service, test_user, other_user):
    assert service.update_nickname(test_user, " 새이름 ")["nickname"] == "새이름"
    db.refresh(test_user)
    assert test_user.nickname == "새이름"

    with pytest.raises(ConflictException) as exc_info:
        service.update_nickname(test_user, "critic")
    assert exc_info.value.code == "NICKNAME_TAKEN"


def test_update_profile(service, test_user):
    result = service.update_profile(test_user, bio="  영화제 단골  ", letterboxd_id="viewer_lb")
    assert result["bio"] == "영화제 단골"
    assert result["letterboxd_id"] == "viewer_lb"
    assert result["nickname"] == "viewer"

    cleared = service.update_profile(test_user, bio="", letterboxd_id="")
    assert cleared["bio"] is None
    assert cleared["letterboxd_id"] is None


@pytest.mark.parametrize(
    "kwargs,code",
    [
        ({"bio": "x" * 161}, "BIO_TOO_LONG"),
        ({"letterboxd_id": "has space"}, "INVALID_LETTERBOXD_ID"),
        ({"nickname": "?"}, "INVALID_NICKNAME_LENGTH"),
    ],
)
def test_update_profile_validation(service, test_user, kwargs, code):
    with pytest.raises(ValidationException) as exc_info:
        service.update_profile(test_user, **kwargs)
    assert exc_info.value.code == code


def test_agree_to_terms_is_idempotent(service, test_user):
    first = service.agree_to_terms(test_user)
    assert first["needs_onboarding"] is False
    accepted_at = first["terms_accepted_at"]

    assert service.agree_to_terms(test_user)["terms_accepted_at"] == accepted_at


def test_delete_account_cascades(db, catalog, service, test_user, other_user):
    entries = UserEntryService(db)
    others_entry = entries.upsert_entry(other_user.id, "film_a", rating=4.0, short_review="인생 영화")
    mine = entries.upsert_entry(test_user.id, "film_b", rating=3.0, short_review="그럭저럭")
    reviews = ReviewService(db, store=catalog)
    reviews.toggle_like(test_user.id, others_entry["id"])
    reviews.toggle_like(other_user.id, mine["id"])
    FavoriteScreeningService(db).set_favorite(test_user.id, "scr_a1")
    social = SocialService(db, store=catalog)
    social.toggle_follow(test_user.id, other_user.id)
    social.toggle_follow(other_user.id, test_user.id)
    user_id = test_user.id

    service.delete_account(test_user)
    db.expire_all()

    assert db.get(User, user_id) is None
    assert db.get(UserEntry, others_entry["id"]).like_count == 0
    assert db.query(UserEntry).filter(UserEntry.user_id == user_id).count() == 0
    assert db.query(EntryLike).count() == 0
    assert db.query(FavoriteScreening).count() == 0
    assert db.query(Follow).count() == 0

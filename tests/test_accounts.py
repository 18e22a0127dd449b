import pytest

from saad_social.errors import AuthProviderError, BackendWriteError, DuplicatePhone, InvalidMedia
from saad_social.models import Credential, DEFAULT_BIO, User, default_avatar


async def test_register_creates_profile_with_defaults(db):
    user = await db.register("Alice", "Alice@Example.com", "+1000", "secret1")

    assert user.email == "alice@example.com"
    assert user.bio == DEFAULT_BIO
    assert user.avatar == default_avatar(str(user.id))
    assert user.friends == [] and user.sentRequests == [] and user.receivedRequests == []
    assert await Credential.get(user.id) is not None
    assert db.auth.current_uid == str(user.id)


async def test_duplicate_phone_rejected_before_credential_is_created(db, make_session):
    await db.register("Alice", "a@x.com", "+1000", "secret1")

    with pytest.raises(DuplicatePhone):
        await make_session().register("Bob", "b@x.com", "+1000", "secret2")

    assert await Credential.find_one(Credential.email == "b@x.com") is None
    assert await User.find_one(User.email == "b@x.com") is None


async def test_duplicate_email_and_weak_password(db, make_session):
    await db.register("Alice", "a@x.com", "+1000", "secret1")

    with pytest.raises(AuthProviderError) as duplicate:
        await make_session().register("Other", "a@x.com", "+3000", "secret3")
    assert duplicate.value.message_key == "error_email_in_use"

    with pytest.raises(AuthProviderError) as weak:
        await make_session().register("Weak", "w@x.com", "+4000", "123")
    assert weak.value.message_key == "error_weak_password"


async def test_login_and_logout(alice, make_session):
    session = make_session()
    user = await session.login("alice@example.com", "secret1")
    assert str(user.id) == str(alice.id)

    await session.logout()
    assert session.auth.current_uid is None

    with pytest.raises(AuthProviderError) as wrong:
        await session.login("alice@example.com", "nope")
    assert wrong.value.message_key == "error_invalid_credential"


async def test_login_without_profile_returns_none(db):
    credential = await db.auth.create_user("ghost@x.com", "secret1")
    assert credential.id is not None
    assert await db.login("ghost@x.com", "secret1") is None


async def test_auth_change_delivers_current_account(make_session):
    session = make_session()
    seen = []
    unsubscribe = await session.on_auth_change(seen.append)
    assert seen == [None]

    user = await session.register("Carol", "carol@x.com", "+5000", "secret5")
    assert str(seen[-1].id) == str(user.id)

    await session.logout()
    assert seen[-1] is None

    unsubscribe()
    await session.login("carol@x.com", "secret5")
    assert seen[-1] is None


async def test_update_profile_reaches_user_subscription(db, alice):
    snapshots = []
    unsubscribe = await db.subscribe_to_user(str(alice.id), snapshots.append)
    assert snapshots[-1].name == "Alice"

    await db.update_profile(str(alice.id), {"name": "Alicia", "language": "ar", "friends": ["hacker"]})
    assert snapshots[-1].name == "Alicia"
    assert snapshots[-1].language == "ar"
    assert snapshots[-1].friends == []

    unsubscribe()
    await db.update_profile(str(alice.id), {"bio": "later"})
    assert snapshots[-1].bio != "later"


async def test_update_profile_validates_avatar(db, alice):
    await db.update_profile(str(alice.id), {"avatar": "aGVsbG8"})
    user = await db.get_user(str(alice.id))
    assert user.avatar == "data:image/jpeg;base64,aGVsbG8="

    with pytest.raises(InvalidMedia):
        await db.update_profile(str(alice.id), {"avatar": "data:image/png;base64,***"})


async def test_update_profile_of_missing_account_fails(db):
    with pytest.raises(BackendWriteError):
        await db.update_profile("65a000000000000000000000", {"name": "Nobody"})


async def test_search_matches_name_or_phone_and_excludes_self(db, alice, bob):
    by_name = await db.search_users(str(alice.id), "BO")
    assert [u.name for u in by_name] == ["Bob"]

    by_phone = await db.search_users(str(alice.id), "+2000")
    assert [u.name for u in by_phone] == ["Bob"]

    assert all(str(u.id) != str(alice.id) for u in await db.search_users(str(alice.id), ""))


async def test_search_scans_only_a_bounded_window(db, alice, make_session):
    # Alice + 49 người khác = 50 tài khoản đầu tiên; Bob là tài khoản thứ 51
    for index in range(49):
        await User(name=f"Filler {index}", email=f"f{index}@x.com", phone=f"+9{index:04d}").insert()
    bob = await make_session().register("Bob", "bob@example.com", "+2000", "secret2")

    assert await User.find_all().count() == 51
    results = await db.search_users(str(alice.id), "bob")
    assert str(bob.id) not in [str(u.id) for u in results]

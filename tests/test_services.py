from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from socialfeed.core.errors import ErrorKind, classify_integrity_error
from socialfeed.modules.follows.models.follow import Follow
from socialfeed.modules.follows.services.follow import (
    FollowOutcome, follow, get_follow_counts, get_followee_ids, is_following, unfollow
)
from socialfeed.modules.home_feed.services.feed import get_timeline
from socialfeed.modules.posts.likes.models.like import Like
from socialfeed.modules.posts.likes.services.like import (
    LikeOutcome, get_like_counts, get_liked_post_ids, like, like_count, unlike
)
from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.posts.schemas.post import PostCreate
from socialfeed.modules.posts.services.post import create_post, get_public_timeline, get_user_posts
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.services.user import (
    create_user, delete_user, get_user_by_login, get_user_stats
)


def _user(db, username):
    return create_user(db, username=username, email=f"{username}@example.com", password="secret123")


def _post(db, author, text):
    return create_post(db, PostCreate(text=text), author.id)


def test_follow_outcomes(db_session):
    alice = _user(db_session, "alice")
    bob = _user(db_session, "bob")

    assert follow(db_session, alice.id, alice.id) is FollowOutcome.SELF_FOLLOW
    assert follow(db_session, alice.id, bob.id) is FollowOutcome.CREATED
    assert follow(db_session, alice.id, bob.id) is FollowOutcome.ALREADY_FOLLOWING
    assert is_following(db_session, alice.id, bob.id)
    assert not is_following(db_session, bob.id, alice.id)
    assert not is_following(db_session, alice.id, alice.id)
    assert get_followee_ids(db_session, alice.id) == {bob.id}
    assert get_follow_counts(db_session, bob.id) == {"followers": 1, "following": 0}

    assert unfollow(db_session, alice.id, bob.id) is FollowOutcome.REMOVED
    assert unfollow(db_session, alice.id, bob.id) is FollowOutcome.NOT_FOLLOWING
    assert get_followee_ids(db_session, alice.id) == set()


def test_like_outcomes_and_counts(db_session):
    alice = _user(db_session, "alice")
    bob = _user(db_session, "bob")
    first = _post(db_session, alice, "first")
    second = _post(db_session, alice, "second")

    assert like(db_session, bob.id, first.id) is LikeOutcome.CREATED
    assert like(db_session, bob.id, first.id) is LikeOutcome.ALREADY_LIKED
    assert like(db_session, alice.id, first.id) is LikeOutcome.CREATED
    assert like_count(db_session, first.id) == 2

    assert get_like_counts(db_session, [first.id, second.id]) == {first.id: 2}
    assert get_liked_post_ids(db_session, bob.id, [first.id, second.id]) == {first.id}
    assert get_liked_post_ids(db_session, None, [first.id]) == set()

    assert unlike(db_session, bob.id, first.id) is LikeOutcome.REMOVED
    assert unlike(db_session, bob.id, first.id) is LikeOutcome.NOT_LIKED
    assert like_count(db_session, first.id) == 1


def test_timeline_merges_followees_newest_first(db_session):
    alice = _user(db_session, "alice")
    bob = _user(db_session, "bob")
    carol = _user(db_session, "carol")
    follow(db_session, alice.id, bob.id)

    a1 = _post(db_session, alice, "a1")
    b1 = _post(db_session, bob, "b1")
    c1 = _post(db_session, carol, "c1")
    a2 = _post(db_session, alice, "a2")

    timeline = get_timeline(db_session, alice.id, limit=10)
    assert [post.id for post in timeline] == [a2.id, b1.id, a1.id]
    assert [post.id for post in get_timeline(db_session, alice.id, limit=2)] == [a2.id, b1.id]
    assert [post.id for post in get_timeline(db_session, carol.id)] == [c1.id]


def test_login_lookup_accepts_username_or_email(db_session):
    alice = _user(db_session, "alice")
    assert get_user_by_login(db_session, "alice").id == alice.id
    assert get_user_by_login(db_session, "ALICE@example.com").id == alice.id
    assert get_user_by_login(db_session, "nobody") is None


def test_deleting_user_cascades(db_session):
    alice = _user(db_session, "alice")
    bob = _user(db_session, "bob")
    post = _post(db_session, alice, "hello")
    bob_post = _post(db_session, bob, "hi")
    like(db_session, bob.id, post.id)
    like(db_session, alice.id, bob_post.id)
    follow(db_session, alice.id, bob.id)
    follow(db_session, bob.id, alice.id)

    delete_user(db_session, alice)

    assert db_session.query(User).count() == 1
    assert db_session.query(Post).filter(Post.author_id == alice.id).count() == 0
    assert db_session.query(Like).count() == 0
    assert db_session.query(Follow).count() == 0
    assert get_user_stats(db_session, bob.id).model_dump() == {"posts": 1, "followers": 0, "following": 0}


def test_duplicate_username_is_classified_as_conflict(db_session):
    _user(db_session, "alice")
    db_session.add(User(id="other", username="alice", email="other@example.com", hashed_password="x"))
    with pytest.raises(IntegrityError) as excinfo:
        db_session.commit()
    db_session.rollback()

    kind, message = classify_integrity_error(excinfo.value)
    assert kind is ErrorKind.CONFLICT
    assert message == "username already exists"


def test_self_follow_is_rejected_by_the_store(db_session):
    alice = _user(db_session, "alice")
    db_session.add(Follow(follower_id=alice.id, followee_id=alice.id))
    with pytest.raises(IntegrityError) as excinfo:
        db_session.commit()
    db_session.rollback()

    kind, _ = classify_integrity_error(excinfo.value)
    assert kind is ErrorKind.VALIDATION


def test_like_on_missing_post_violates_foreign_key(db_session):
    alice = _user(db_session, "alice")
    db_session.add(Like(user_id=alice.id, post_id="missing"))
    with pytest.raises(IntegrityError) as excinfo:
        db_session.commit()
    db_session.rollback()

    kind, message = classify_integrity_error(excinfo.value)
    assert kind is ErrorKind.VALIDATION
    assert message == "Referenced record does not exist"


def test_posts_with_equal_timestamps_keep_a_stable_order(db_session):
    alice = _user(db_session, "alice")
    posted_at = datetime(2024, 1, 1, 12, 0, 0)
    for post_id in ("post-a", "post-c", "post-b"):
        db_session.add(Post(id=post_id, author_id=alice.id, text=post_id, created_at=posted_at, updated_at=posted_at))
    db_session.commit()

    expected = ["post-c", "post-b", "post-a"]
    assert [post.id for post in get_timeline(db_session, alice.id)] == expected
    assert [post.id for post in get_public_timeline(db_session)] == expected
    assert [post.id for post in get_public_timeline(db_session, skip=1, limit=1)] == ["post-b"]
    assert [post.id for post in get_user_posts(db_session, alice.id)] == expected

# mypy: ignore-errors
"""Tests for the draft lifecycle."""

import pytest

from lumo.core.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from lumo.models import Bookmark, Comment, Like, Notification, Post, PostCollaborator, Tag
from lumo.models.notification import NOTIFICATION_TYPE_INVITE
from lumo.schemas.post import PostUpdate
from lumo.services.access import Permission
from lumo.services.posts import PostService, normalize_tags


@pytest.fixture()
def service(db_session, broadcaster):
    return PostService(db_session, broadcaster)


def test_create_draft_belongs_to_caller(service, ctx, author) -> None:
    post = service.create_draft(ctx(author), title="First", content="<p>hi</p>")

    assert post.author_id == author.id
    assert post.status == "draft"
    assert post.read_time is None
    assert len(post.id) == 32


def test_create_draft_requires_identity(service, ctx) -> None:
    with pytest.raises(UnauthorizedError):
        service.create_draft(ctx(None), title="x")


def test_get_post_access(service, ctx, draft, published_post, editor, outsider, grant) -> None:
    assert service.get_post(ctx(None), published_post.id)[1] is Permission.NONE

    with pytest.raises(UnauthorizedError):
        service.get_post(ctx(None), draft.id)
    with pytest.raises(ForbiddenError):
        service.get_post(ctx(outsider), draft.id)

    grant(draft, editor, "view")
    post, permission = service.get_post(ctx(editor), draft.id)
    assert post.id == draft.id
    assert permission is Permission.VIEW


def test_get_missing_post(service, ctx, author) -> None:
    with pytest.raises(NotFoundError):
        service.get_post(ctx(author), "does-not-exist")


def test_update_merges_only_present_fields(service, ctx, author, draft, broadcaster) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(title="New title"))

    assert draft.title == "New title"
    assert draft.content == "<p>Early thoughts on gardening</p>"

    [event] = broadcaster.named("post-updated")
    assert event["room"] == f"post-{draft.id}"
    assert event["payload"]["title"] == "New title"
    assert event["payload"]["updated_by"] == author.id


def test_update_can_clear_a_field(service, ctx, author, draft) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(cover_image_url="http://img"))
    service.update_draft(ctx(author), draft.id, PostUpdate(cover_image_url=None))
    assert draft.cover_image_url is None


def test_last_write_wins(service, ctx, author, editor, draft, grant) -> None:
    grant(draft, editor, "edit")

    service.update_draft(ctx(author), draft.id, PostUpdate(title="From author"))
    service.update_draft(ctx(editor), draft.id, PostUpdate(title="From editor"))

    assert service.load_post(draft.id).title == "From editor"


def test_update_skips_originating_socket(service, ctx, author, draft, broadcaster) -> None:
    service.update_draft(ctx(author, socket_id="sid-1"), draft.id, PostUpdate(content="x"))
    assert broadcaster.named("post-updated")[0]["skip_sid"] == "sid-1"


@pytest.mark.parametrize("permission", ["comment", "view"])
def test_non_editors_cannot_update(service, ctx, editor, draft, grant, permission) -> None:
    grant(draft, editor, permission)
    with pytest.raises(ForbiddenError):
        service.update_draft(ctx(editor), draft.id, PostUpdate(title="nope"))


def test_edit_grant_does_not_apply_after_publish(service, ctx, editor, published_post, grant) -> None:
    grant(published_post, editor, "edit")
    with pytest.raises(ForbiddenError):
        service.update_draft(ctx(editor), published_post.id, PostUpdate(title="nope"))


def test_update_missing_post(service, ctx, author) -> None:
    with pytest.raises(NotFoundError):
        service.update_draft(ctx(author), "missing", PostUpdate(title="x"))


def test_tags_are_normalized_and_replaced(service, ctx, author, draft, db_session) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(tags=[" Python ", "#web", "python"]))
    assert draft.tag_names == ["python", "web"]

    service.update_draft(ctx(author), draft.id, PostUpdate(tags=["web"]))
    assert draft.tag_names == ["web"]
    # Tags stay in the catalogue even when no post uses them.
    assert db_session.query(Tag).count() == 2


def test_too_many_tags_leaves_post_unchanged(service, ctx, author, draft) -> None:
    with pytest.raises(ValidationError) as exc_info:
        service.update_draft(
            ctx(author), draft.id, PostUpdate(title="changed", tags=["a", "b", "c", "d", "e", "f"])
        )
    assert exc_info.value.field == "tags"
    assert service.load_post(draft.id).title == "Working title"


def test_normalize_tags_rejects_long_names() -> None:
    with pytest.raises(ValidationError):
        normalize_tags(["x" * 51])


def test_publish_computes_read_time(service, ctx, author, draft) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(content=" ".join(["word"] * 400)))

    post = service.publish(ctx(author), draft.id)

    assert post.status == "published"
    assert post.read_time == 2
    assert post.published_at is not None


def test_publish_single_word_takes_one_minute(service, ctx, author, draft) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(content="word"))
    assert service.publish(ctx(author), draft.id).read_time == 1


def test_publish_twice_recomputes(service, ctx, author, draft) -> None:
    first = service.publish(ctx(author), draft.id)
    first_published_at = first.published_at

    service.update_draft(ctx(author), draft.id, PostUpdate(content=" ".join(["word"] * 401)))
    second = service.publish(ctx(author), draft.id)

    assert second.read_time == 3
    assert second.published_at >= first_published_at

    # Already published: publishing again still succeeds.
    assert service.publish(ctx(author), draft.id).status == "published"


def test_only_author_publishes(service, ctx, editor, draft, grant) -> None:
    grant(draft, editor, "edit")
    with pytest.raises(ForbiddenError, match="Only the author can publish this post"):
        service.publish(ctx(editor), draft.id)


def test_delete_cascades(service, ctx, author, editor, draft, grant, db_session) -> None:
    grant(draft, editor, "comment")
    db_session.add_all(
        [
            Comment(post_id=draft.id, user_id=editor.id, content="nice"),
            Like(post_id=draft.id, user_id=editor.id),
            Bookmark(post_id=draft.id, user_id=editor.id),
            Notification(user_id=editor.id, post_id=draft.id, type=NOTIFICATION_TYPE_INVITE, message="m"),
        ]
    )
    db_session.commit()
    post_id = draft.id

    service.delete_post(ctx(author), post_id)

    assert db_session.get(Post, post_id) is None
    for model in (Comment, Like, Bookmark, PostCollaborator, Notification):
        assert db_session.query(model).filter_by(post_id=post_id).count() == 0


def test_only_author_deletes(service, ctx, editor, draft, grant) -> None:
    grant(draft, editor, "edit")
    with pytest.raises(ForbiddenError):
        service.delete_post(ctx(editor), draft.id)


def test_list_my_drafts(service, ctx, author, editor, draft, published_post, grant, db_session) -> None:
    grant(draft, editor, "edit")
    db_session.add(
        Notification(user_id=editor.id, post_id=draft.id, type=NOTIFICATION_TYPE_INVITE, message="m")
    )
    db_session.commit()

    mine = service.list_my_drafts(ctx(author))
    assert [post.id for post in mine.my_drafts] == [draft.id]
    assert mine.shared_with_me == []

    theirs = service.list_my_drafts(ctx(editor))
    assert theirs.my_drafts == []
    [shared] = theirs.shared_with_me
    assert shared.id == draft.id
    assert shared.author_name == "alice"
    assert shared.permission == "edit"
    assert shared.is_viewed is False


def test_published_listings(service, ctx, author, draft, published_post) -> None:
    assert [post.id for post in service.list_my_published(ctx(author))] == [published_post.id]
    assert [post.id for post in service.list_published()] == [published_post.id]
    assert service.list_published(offset=1) == []


def test_search(service, ctx, author, draft, published_post) -> None:
    service.update_draft(ctx(author), published_post.id, PostUpdate(tags=["intro", "meta"]))
    service.update_draft(ctx(author), draft.id, PostUpdate(title="Hello draft", tags=["intro"]))

    assert [p.id for p in service.search_posts("hello")] == [published_post.id]
    assert [p.id for p in service.search_posts("ALICE")] == [published_post.id]
    assert [p.id for p in service.search_posts("#intro #meta")] == [published_post.id]
    assert service.search_posts("#intro #missing") == []
    assert [p.id for p in service.search_posts("#intro world")] == [published_post.id]
    assert service.search_posts("   ") == []


def test_dashboard_stats(service, ctx, author, editor, draft, published_post, db_session) -> None:
    db_session.add_all(
        [
            Like(post_id=published_post.id, user_id=editor.id),
            Comment(post_id=published_post.id, user_id=editor.id, content="great"),
            Comment(post_id=published_post.id, user_id=author.id, content="thanks"),
        ]
    )
    db_session.commit()

    stats = service.dashboard_stats(ctx(author))

    assert stats.drafts == 1
    assert stats.published == 1
    assert stats.likes_received == 1
    assert stats.comments_received == 1


def test_post_updated_payload_carries_utc_timestamp(service, ctx, author, draft, broadcaster) -> None:
    service.update_draft(ctx(author), draft.id, PostUpdate(title="t"))
    assert broadcaster.named("post-updated")[0]["payload"]["updated_at"].endswith("+00:00")


def test_search_treats_wildcards_literally(service, ctx, author, published_post) -> None:
    assert service.search_posts("%") == []
    assert service.search_posts("_") == []
    assert service.search_posts("hello_world") == []

    service.update_draft(ctx(author), published_post.id, PostUpdate(title="Growth up 100% this year"))

    assert [p.id for p in service.search_posts("100%")] == [published_post.id]
    assert service.search_posts("10_%") == []

"""
Blog endpoints enforce page capabilities on every operation.
"""
from blogdesk import db
from blogdesk.access_store import page_access_store
from blogdesk.models import BlogPost
from blogdesk.permissions import update_module_permission


def _make_post(title="Hello", author_id="ed"):
    post = BlogPost(
        title=title,
        content="Body",
        author_id=author_id,
        author_name="Ed",
        author_email="ed@example.com",
    )
    db.session.add(post)
    db.session.commit()
    return post.id


def test_viewer_lists_and_reads_posts(client, sign_in):
    post_id = _make_post()
    sign_in("vera")

    response = client.get("/api/blog")
    assert response.status_code == 200
    assert [post["id"] for post in response.get_json()["posts"]] == [post_id]

    response = client.get(f"/api/blog/{post_id}")
    assert response.status_code == 200
    assert response.get_json()["post"]["title"] == "Hello"


def test_listing_reachable_through_item_view(client, sign_in):
    page_access_store.upsert("viewer", "/blog", can_view=False)
    sign_in("vera")
    assert client.get("/api/blog").status_code == 200

    page_access_store.upsert("viewer", "/blog/[id]", can_view=False)
    assert client.get("/api/blog").status_code == 403


def test_create_requires_add_on_create_page(client, sign_in):
    sign_in("ed", "editor")

    response = client.post("/api/blog", json={"title": "Draft", "content": "Words"})
    assert response.status_code == 403
    assert BlogPost.query.count() == 0

    page_access_store.upsert("editor", "/blog/create", can_view=True, can_add=True)
    response = client.post("/api/blog", json={"title": "Draft", "content": "Words", "published": True})
    assert response.status_code == 201
    post = response.get_json()["post"]
    assert post["author_id"] == "ed"
    assert post["author_email"] == "ed@example.com"
    assert post["published"] is True


def test_create_rejects_blank_fields(client, sign_in):
    sign_in("root", "admin")

    response = client.post("/api/blog", json={"title": "  ", "content": "Words"})
    assert response.status_code == 400
    assert BlogPost.query.count() == 0


def test_update_requires_edit_on_edit_page(client, sign_in):
    post_id = _make_post()
    sign_in("ed", "editor")

    assert client.put(f"/api/blog/{post_id}", json={"title": "New"}).status_code == 403

    update_module_permission("editor", "blog", "edit", True)
    response = client.put(f"/api/blog/{post_id}", json={"title": "New"})
    assert response.status_code == 200
    assert response.get_json()["post"]["title"] == "New"
    assert response.get_json()["post"]["content"] == "Body"


def test_delete_requires_delete_on_item_page(client, sign_in):
    post_id = _make_post()
    sign_in("ed", "editor")

    assert client.delete(f"/api/blog/{post_id}").status_code == 403

    page_access_store.upsert("editor", "/blog/[id]", can_view=True, can_delete=True)
    assert client.delete(f"/api/blog/{post_id}").status_code == 200
    assert db.session.get(BlogPost, post_id) is None


def test_missing_post_returns_404(client, sign_in):
    sign_in("root", "admin")

    response = client.get("/api/blog/999")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Post not found"
    assert client.delete("/api/blog/999").status_code == 404


def test_blog_requires_sign_in(client):
    assert client.get("/api/blog").status_code == 401
    assert client.post("/api/blog", json={"title": "x", "content": "y"}).status_code == 401

"""Tests for portfolio, testimonials, banners, contact page content and the inbox."""
from __future__ import annotations

from datetime import datetime, timedelta

from beauty_portfolio.extensions import db
from beauty_portfolio.models import ContactMessage, PortfolioItem


def _portfolio(client, headers, **overrides):
    payload = {
        "title": "Soft glam",
        "description": "Evening look",
        "category": "event",
        "image_url": "https://cdn.example.com/soft-glam.jpg",
        "tags": ["glam", " evening "],
    }
    payload.update(overrides)
    return client.post("/admin/portfolio", headers=headers, json=payload)


# --- Portfolio ---


def test_portfolio_display_modes(client, admin_headers) -> None:
    plain = _portfolio(client, admin_headers).get_json()["item"]
    compare = _portfolio(
        client,
        admin_headers,
        before_image_url="https://cdn.example.com/before.jpg",
        after_image_url="https://cdn.example.com/after.jpg",
    ).get_json()["item"]
    video = _portfolio(
        client,
        admin_headers,
        before_image_url="https://cdn.example.com/before.jpg",
        video_url="https://cdn.example.com/clip.mp4",
    ).get_json()["item"]

    assert plain["display_mode"] == "image"
    assert plain["tags"] == ["glam", "evening"]
    assert compare["display_mode"] == "before_after"
    assert video["display_mode"] == "video"


def test_portfolio_requires_title_and_image(client, admin_headers) -> None:
    assert _portfolio(client, admin_headers, title="").status_code == 400
    assert _portfolio(client, admin_headers, image_url=None).status_code == 400
    assert _portfolio(client, admin_headers, tags="glam").status_code == 400


def test_public_portfolio_filters(client, admin_headers) -> None:
    _portfolio(client, admin_headers, title="Bride one", category="bridal", featured=True)
    _portfolio(client, admin_headers, title="Bride two", category="bridal")
    _portfolio(client, admin_headers, title="Party", category="event", featured=True)

    bridal = client.get("/portfolio?category=bridal").get_json()["items"]
    featured = client.get("/portfolio?featured=true").get_json()["items"]

    assert {item["title"] for item in bridal} == {"Bride one", "Bride two"}
    assert {item["title"] for item in featured} == {"Bride one", "Party"}


def test_update_and_delete_portfolio_item(client, admin_headers) -> None:
    item_id = _portfolio(client, admin_headers).get_json()["item"]["id"]

    updated = client.patch(f"/admin/portfolio/{item_id}", headers=admin_headers, json={"featured": True})
    deleted = client.delete(f"/admin/portfolio/{item_id}", headers=admin_headers)

    assert updated.get_json()["item"]["featured"] is True
    assert deleted.status_code == 200
    assert client.patch(f"/admin/portfolio/{item_id}", headers=admin_headers, json={}).status_code == 404


def test_bulk_delete_reports_counts(app, client, admin_headers) -> None:
    ids = [_portfolio(client, admin_headers, title=f"Look {i}").get_json()["item"]["id"] for i in range(3)]

    response = client.post(
        "/admin/portfolio/bulk/delete", headers=admin_headers, json={"ids": ids[:2] + ["missing"]}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert (data["successful"], data["failed"], data["total"]) == (2, 1, 3)
    with app.app_context():
        assert [item.id for item in PortfolioItem.query.all()] == [ids[2]]


def test_bulk_feature(client, admin_headers) -> None:
    ids = [_portfolio(client, admin_headers, title=f"Look {i}").get_json()["item"]["id"] for i in range(2)]

    response = client.post(
        "/admin/portfolio/bulk/feature", headers=admin_headers, json={"ids": ids, "featured": True}
    )

    assert response.get_json()["successful"] == 2
    assert len(client.get("/portfolio?featured=true").get_json()["items"]) == 2


def test_bulk_actions_validate_payload(client, admin_headers) -> None:
    assert client.post("/admin/portfolio/bulk/delete", headers=admin_headers, json={}).status_code == 400
    assert client.post(
        "/admin/portfolio/bulk/feature", headers=admin_headers, json={"ids": [], "featured": "yes"}
    ).status_code == 400


def test_portfolio_management_requires_auth(client) -> None:
    assert client.post("/admin/portfolio", json={}).status_code == 401
    assert client.post("/admin/portfolio/bulk/delete", json={"ids": []}).status_code == 401


# --- Testimonials ---


def _testimonial(client, headers, **overrides):
    payload = {
        "client_name": "Priya N.",
        "service": "Bridal Makeup",
        "rating": 5,
        "testimonial": "Flawless all night.",
        "avatar_initials": "PN",
    }
    payload.update(overrides)
    return client.post("/admin/testimonials", headers=headers, json=payload)


def test_testimonial_rating_bounds(client, admin_headers) -> None:
    assert _testimonial(client, admin_headers, rating=0).status_code == 400
    assert _testimonial(client, admin_headers, rating=6).status_code == 400
    assert _testimonial(client, admin_headers, rating="5").status_code == 400
    assert _testimonial(client, admin_headers, rating=4).status_code == 201


def test_public_testimonials_hide_inactive(client, admin_headers) -> None:
    _testimonial(client, admin_headers, client_name="Shown")
    hidden_id = _testimonial(client, admin_headers, client_name="Hidden").get_json()["testimonial"]["id"]
    client.patch(f"/admin/testimonials/{hidden_id}", headers=admin_headers, json={"active": False})

    public = client.get("/testimonials").get_json()["testimonials"]
    everything = client.get("/admin/testimonials", headers=admin_headers).get_json()["testimonials"]

    assert [t["client_name"] for t in public] == ["Shown"]
    assert len(everything) == 2


def test_delete_testimonial(client, admin_headers) -> None:
    testimonial_id = _testimonial(client, admin_headers).get_json()["testimonial"]["id"]

    assert client.delete(f"/admin/testimonials/{testimonial_id}", headers=admin_headers).status_code == 200
    assert client.delete(f"/admin/testimonials/{testimonial_id}", headers=admin_headers).status_code == 404


# --- Banners ---


def test_public_banners_respect_window_and_priority(client, admin_headers) -> None:
    now = datetime.now()
    banners = [
        {"title": "Low", "description": "d", "priority": 1},
        {"title": "High", "description": "d", "priority": 10, "end_date": (now + timedelta(days=5)).isoformat()},
        {"title": "Expired", "description": "d", "end_date": (now - timedelta(days=1)).isoformat()},
        {"title": "Upcoming", "description": "d", "start_date": (now + timedelta(days=1)).isoformat()},
        {"title": "Off", "description": "d", "active": False},
    ]
    for banner in banners:
        assert client.post("/admin/banners", headers=admin_headers, json=banner).status_code == 201

    public = client.get("/banners").get_json()["banners"]
    everything = client.get("/admin/banners", headers=admin_headers).get_json()["banners"]

    assert [b["title"] for b in public] == ["High", "Low"]
    assert len(everything) == 5


def test_banner_window_validation(client, admin_headers) -> None:
    reversed_window = client.post(
        "/admin/banners",
        headers=admin_headers,
        json={"title": "t", "description": "d", "start_date": "2024-06-10", "end_date": "2024-06-01"},
    )
    bad_date = client.post(
        "/admin/banners", headers=admin_headers, json={"title": "t", "description": "d", "start_date": "soon"}
    )

    assert reversed_window.status_code == 400
    assert bad_date.status_code == 400


def test_update_and_delete_banner(client, admin_headers) -> None:
    banner_id = client.post(
        "/admin/banners", headers=admin_headers, json={"title": "Spring", "description": "d"}
    ).get_json()["banner"]["id"]

    updated = client.patch(f"/admin/banners/{banner_id}", headers=admin_headers, json={"cta_text": "Book now"})

    assert updated.get_json()["banner"]["cta_text"] == "Book now"
    assert client.delete(f"/admin/banners/{banner_id}", headers=admin_headers).status_code == 200
    assert client.get("/banners").get_json()["banners"] == []


# --- Contact page content ---


def test_faqs_crud_and_ordering(client, admin_headers) -> None:
    second = client.post(
        "/admin/contact/faqs", headers=admin_headers, json={"question": "Q2", "answer": "A2", "display_order": 2}
    ).get_json()["faq"]
    client.post("/admin/contact/faqs", headers=admin_headers, json={"question": "Q1", "answer": "A1", "display_order": 1})

    client.put(f"/admin/contact/faqs/{second['id']}", headers=admin_headers, json={"active": False})

    public = client.get("/contact/faqs").get_json()["faqs"]
    assert [faq["question"] for faq in public] == ["Q1"]
    assert client.delete(f"/admin/contact/faqs/{second['id']}", headers=admin_headers).status_code == 200
    assert len(client.get("/admin/contact/faqs", headers=admin_headers).get_json()["faqs"]) == 1


def test_contact_info(client, admin_headers) -> None:
    assert client.get("/contact/info").get_json() == {"info": None}

    info = client.post(
        "/admin/contact/info",
        headers=admin_headers,
        json={"title": "Get in touch", "phone": "555-0100", "hours": "Tue-Sat 9-6"},
    ).get_json()["info"]
    client.put(f"/admin/contact/info/{info['id']}", headers=admin_headers, json={"subtitle": "We reply fast"})

    public = client.get("/contact/info").get_json()["info"]
    assert public["title"] == "Get in touch"
    assert public["subtitle"] == "We reply fast"


def test_social_media_links(client, admin_headers) -> None:
    link = client.post(
        "/admin/contact/social-media",
        headers=admin_headers,
        json={"platform": "instagram", "url": "https://instagram.com/studio", "display_order": 1},
    ).get_json()["link"]
    client.post(
        "/admin/contact/social-media",
        headers=admin_headers,
        json={"platform": "tiktok", "url": "https://tiktok.com/@studio", "display_order": 0},
    )

    assert [entry["platform"] for entry in client.get("/contact/social-media").get_json()["links"]] == ["tiktok", "instagram"]

    client.put(f"/admin/contact/social-media/{link['id']}", headers=admin_headers, json={"url": "https://ig.me/studio"})
    client.delete(f"/admin/contact/social-media/{link['id']}", headers=admin_headers)
    assert [entry["platform"] for entry in client.get("/contact/social-media").get_json()["links"]] == ["tiktok"]


# --- Contact form and inbox ---


def test_contact_form_stores_unread_message(app, client) -> None:
    response = client.post(
        "/contact",
        json={
            "first_name": "Morgan",
            "last_name": "Lee",
            "email": "morgan@example.com",
            "subject": "Wedding party",
            "message": "Do you travel?",
        },
    )

    assert response.status_code == 201
    with app.app_context():
        message = db.session.get(ContactMessage, response.get_json()["id"])
        assert message.status == "unread"
        assert message.phone is None


def test_contact_form_requires_fields(client) -> None:
    response = client.post("/contact", json={"first_name": "Morgan", "email": "morgan@example.com"})

    assert response.status_code == 400


def test_inbox_listing_and_status_update(client, admin_headers) -> None:
    for subject in ("First", "Second"):
        client.post(
            "/contact",
            json={"first_name": "A", "last_name": "B", "email": "a@b.co", "subject": subject, "message": "m"},
        )

    messages = client.get("/admin/contact-messages", headers=admin_headers).get_json()["messages"]
    target = messages[0]["id"]

    read = client.patch(f"/admin/contact-messages/{target}", headers=admin_headers, json={"status": "read"})
    invalid = client.patch(f"/admin/contact-messages/{target}", headers=admin_headers, json={"status": "spam"})
    unread = client.get("/admin/contact-messages?status=unread", headers=admin_headers).get_json()["messages"]

    assert len(messages) == 2
    assert read.get_json()["message"]["status"] == "read"
    assert invalid.status_code == 400
    assert len(unread) == 1


def test_contact_form_rejects_non_string_fields(app, client) -> None:
    response = client.post(
        "/contact",
        json={
            "first_name": "Morgan",
            "last_name": "Lee",
            "email": "morgan@example.com",
            "phone": 5550100,
            "subject": "Wedding party",
            "message": "Do you travel?",
        },
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "phone must be a string"
    with app.app_context():
        assert ContactMessage.query.count() == 0


def test_optional_text_fields_must_be_strings(app, client, admin_headers) -> None:
    created = _portfolio(client, admin_headers, description=5)
    item_id = _portfolio(client, admin_headers).get_json()["item"]["id"]
    updated = client.patch(f"/admin/portfolio/{item_id}", headers=admin_headers, json={"video_url": {"src": "x"}})
    cleared = client.patch(f"/admin/portfolio/{item_id}", headers=admin_headers, json={"video_url": None})

    assert created.status_code == 400
    assert created.get_json()["message"] == "description must be a string"
    assert updated.status_code == 400
    assert cleared.status_code == 200
    with app.app_context():
        assert PortfolioItem.query.count() == 1

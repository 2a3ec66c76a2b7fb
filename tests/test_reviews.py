from halo_optom.models import Review


def review(client, auth, patient, optometrist, rating=5, **extra):
    return client.post(
        "/api/reviews", headers=auth(patient), json={"optometrist_id": optometrist.id, "rating": rating, **extra}
    )


def test_create_review_updates_rating(client, db, patient, optometrist, make_user, auth):
    first = review(client, auth, patient, optometrist, rating=5, comment="Sangat <b>membantu</b>", service_type="chat")
    assert first.status_code == 201
    data = first.json()["data"]
    assert data["status"] == "pending"
    assert data["comment"] == "Sangat membantu"
    assert data["user"]["id"] == patient.id

    review(client, auth, make_user("pasien"), optometrist, rating=4)

    db.refresh(optometrist)
    assert optometrist.rating == 4.5


def test_second_review_edits_and_resets_moderation(client, db, admin, patient, optometrist, auth):
    review_id = review(client, auth, patient, optometrist, rating=2).json()["data"]["id"]
    client.patch(f"/api/reviews/{review_id}/status", headers=auth(admin), json={"status": "approved"})

    edited = review(client, auth, patient, optometrist, rating=4, comment="Lebih baik")

    assert edited.json()["data"]["id"] == review_id
    assert edited.json()["data"]["status"] == "pending"
    assert edited.json()["data"]["rating"] == 4
    assert db.query(Review).count() == 1
    db.refresh(optometrist)
    assert optometrist.rating == 4.0


def test_review_rules(client, patient, optometrist, auth):
    assert review(client, auth, optometrist, optometrist).status_code == 400
    assert review(client, auth, optometrist, patient).status_code == 400
    assert review(client, auth, patient, optometrist, rating=6).status_code == 422
    assert client.post(
        "/api/reviews", headers=auth(patient), json={"optometrist_id": "missing", "rating": 5}
    ).status_code == 404


def test_public_listing_hides_rejected(client, admin, patient, optometrist, make_user, auth):
    keep = review(client, auth, patient, optometrist).json()["data"]["id"]
    hide = review(client, auth, make_user("pasien"), optometrist, rating=1).json()["data"]["id"]
    client.patch(f"/api/reviews/{hide}/status", headers=auth(admin), json={"status": "rejected"})

    public = client.get(f"/api/reviews/optometrist/{optometrist.id}").json()["data"]
    assert [r["id"] for r in public] == [keep]

    everything = client.get("/api/reviews/admin/all", headers=auth(admin)).json()["data"]
    assert len(everything) == 2
    rejected = client.get("/api/reviews/admin/all", headers=auth(admin), params={"status": "rejected"}).json()["data"]
    assert [r["id"] for r in rejected] == [hide]

    mine = client.get("/api/reviews/me", headers=auth(patient)).json()["data"]
    assert [r["id"] for r in mine] == [keep]


def test_report_and_stats(client, admin, patient, optometrist, make_user, auth):
    review_id = review(client, auth, patient, optometrist, rating=3).json()["data"]["id"]
    reporter = make_user("pasien")

    client.post(f"/api/reviews/{review_id}/report", headers=auth(reporter))
    reported = client.post(f"/api/reviews/{review_id}/report", headers=auth(reporter))
    assert reported.json()["report_count"] == 2

    stats = client.get("/api/reviews/admin/stats", headers=auth(admin)).json()
    assert stats["totalReviews"] == 1
    assert stats["pendingReviews"] == 1
    assert stats["reportedReviews"] == 1
    assert stats["averageRating"] == 3.0

    assert client.get("/api/reviews/admin/stats", headers=auth(patient)).status_code == 403


def test_invalid_moderation_status(client, admin, patient, optometrist, auth):
    review_id = review(client, auth, patient, optometrist).json()["data"]["id"]
    response = client.patch(f"/api/reviews/{review_id}/status", headers=auth(admin), json={"status": "hidden"})
    assert response.status_code == 422


def test_delete_review(client, db, admin, patient, optometrist, make_user, auth):
    review_id = review(client, auth, patient, optometrist, rating=5).json()["data"]["id"]

    assert client.delete(f"/api/reviews/{review_id}", headers=auth(make_user("pasien"))).status_code == 403
    assert client.delete(f"/api/reviews/{review_id}", headers=auth(patient)).status_code == 200

    db.refresh(optometrist)
    assert optometrist.rating is None
    assert client.delete(f"/api/reviews/{review_id}", headers=auth(admin)).status_code == 404

from app.models.advertiser import Advertiser, Subuser
from app.models.taxonomy import Location
from app.utils.timewindow import utcnow


class TestAdvertsAPI:
    def _payload(self, **overrides):
        data = {
            "reference": "REF-42",
            "job_title": "Warehouse Operative",
            "job_type": "Temporary",
            "description": "Early shifts, forklift licence preferred.",
            "telephone": "01632 960456",
            "submitters_forename": "Alex",
            "submitters_surname": "Morgan",
            "email": "alex@example.co.uk",
            "email_confirmation": "alex@example.co.uk",
            "password": "hunter22",
            "password_retype": "hunter22",
        }
        data.update(overrides)
        return data

    def _create(self, client, **overrides):
        r = client.post("/api/v1/adverts", json=self._payload(**overrides))
        assert r.status_code == 201, r.text
        return r.json()

    def test_create_advert(self, client):
        data = self._create(client)
        assert data["job_title"] == "Warehouse Operative"
        assert data["slug"] == f"{data['id']}-warehouse-operative"
        assert data["submitters_full_name"] == "Alex Morgan"
        assert data["approved"] is False
        assert data["active"] is True
        assert data["readvertisable"] is False
        assert data["active_until"] is not None
        assert "password" not in data

    def test_create_reports_field_errors(self, client):
        r = client.post("/api/v1/adverts", json=self._payload(
            description="Email cv@agency.co.uk",
            password_retype="different",
            job_title="",
        ))
        assert r.status_code == 422
        fields = {e["field"] for e in r.json()["detail"]}
        assert fields == {"description", "password_retype", "job_title"}

        r = client.get("/api/v1/adverts")
        assert r.json()["total"] == 0

    def test_create_with_unknown_advertiser(self, client):
        r = client.post("/api/v1/adverts", json=self._payload(advertiser_id=999))
        assert r.status_code == 404

    def test_create_with_unknown_subuser(self, client):
        r = client.post("/api/v1/adverts", json=self._payload(subuser_id=999))
        assert r.status_code == 404
        assert r.json()["detail"] == "Subuser not found"

    def test_create_with_another_advertisers_subuser(self, client, db):
        owner = Advertiser(email="a@one.co.uk", forename="A", surname="One", created_at=utcnow())
        other = Advertiser(email="b@two.co.uk", forename="B", surname="Two", created_at=utcnow())
        db.add_all([owner, other])
        db.commit()
        delegate = Subuser(advertiser_id=other.id, email="d@two.co.uk", forename="D", surname="Two")
        db.add(delegate)
        db.commit()

        r = client.post("/api/v1/adverts",
                        json=self._payload(advertiser_id=owner.id, subuser_id=delegate.id))
        assert r.status_code == 422

        r = client.post("/api/v1/adverts",
                        json=self._payload(advertiser_id=other.id, subuser_id=delegate.id))
        assert r.status_code == 201

    def test_create_with_unknown_taxonomy_ids(self, client, db):
        leeds = Location(name="Leeds", state="Yorkshire", lft=1, rgt=2)
        db.add(leeds)
        db.commit()

        r = client.post("/api/v1/adverts",
                        json=self._payload(location_ids=[leeds.id, 999], category_ids=[998]))
        assert r.status_code == 422
        errors = {e["field"]: e["message"] for e in r.json()["detail"]}
        assert errors == {"location_ids": "Unknown locations: 999", "category_ids": "Unknown categories: 998"}
        assert client.get("/api/v1/adverts").json()["total"] == 0

    def test_update_with_unknown_location_leaves_advert_unchanged(self, client):
        advert_id = self._create(client)["id"]
        r = client.put(f"/api/v1/adverts/{advert_id}",
                       json={"job_title": "Forklift Driver", "location_ids": [999]})
        assert r.status_code == 422
        assert client.get(f"/api/v1/adverts/{advert_id}").json()["job_title"] == "Warehouse Operative"

    def test_get_and_404(self, client):
        advert_id = self._create(client)["id"]
        assert client.get(f"/api/v1/adverts/{advert_id}").status_code == 200
        assert client.get("/api/v1/adverts/999").status_code == 404

    def test_update_advert(self, client):
        advert_id = self._create(client)["id"]
        r = client.put(f"/api/v1/adverts/{advert_id}", json={"job_title": "Forklift Driver"})
        assert r.status_code == 200
        assert r.json()["job_title"] == "Forklift Driver"

        r = client.put(f"/api/v1/adverts/{advert_id}", json={"description": "Call x@y.com"})
        assert r.status_code == 422

    def test_advertise_lifecycle(self, client):
        advert_id = self._create(client)["id"]
        base = f"/api/v1/adverts/{advert_id}"

        r = client.post(f"{base}/advertise")
        assert r.status_code == 200
        data = r.json()
        assert data["approved"] is True
        assert data["active"] is True
        assert data["live_at"] is not None

        # Already running
        assert client.post(f"{base}/advertise").status_code == 409

        r = client.post(f"{base}/bump")
        assert r.status_code == 200
        assert r.json()["active_until"] == data["active_until"]

        r = client.post(f"{base}/premium-upgrade")
        assert r.status_code == 200
        assert r.json()["premium"] is True
        assert r.json()["bumpable"] is False

        assert client.post(f"{base}/bump").status_code == 409
        assert client.post(f"{base}/premium-upgrade").status_code == 409

    def test_archive_and_unarchive(self, client):
        advert_id = self._create(client)["id"]
        base = f"/api/v1/adverts/{advert_id}"
        client.post(f"{base}/advertise")

        assert client.post(f"{base}/unarchive").status_code == 409
        r = client.post(f"{base}/archive")
        assert r.status_code == 200
        assert r.json()["archived"] is True
        assert client.post(f"{base}/archive").status_code == 409

        r = client.post(f"{base}/unarchive")
        assert r.status_code == 200
        assert r.json()["archived"] is False

    def test_remove_premium_via_update(self, client):
        advert_id = self._create(client)["id"]
        base = f"/api/v1/adverts/{advert_id}"
        client.post(f"{base}/advertise")
        client.post(f"{base}/premium-upgrade")

        r = client.put(base, json={"make_premium": False})
        assert r.status_code == 200
        assert r.json()["premium_until"] is None
        assert r.json()["premiumable"] is True

    def test_list_filters(self, client):
        live_id = self._create(client, job_title="Live Job")["id"]
        self._create(client, job_title="Draft Job")
        client.post(f"/api/v1/adverts/{live_id}/advertise")

        r = client.get("/api/v1/adverts?active=true")
        assert [a["id"] for a in r.json()["adverts"]] == [live_id]

        r = client.get("/api/v1/adverts?premium=false")
        assert r.json()["total"] == 2

        r = client.get("/api/v1/adverts?q=draft")
        assert r.json()["total"] == 1
        assert r.json()["adverts"][0]["job_title"] == "Draft Job"

        r = client.get("/api/v1/adverts?unowned=true&per_page=1")
        assert r.json()["total"] == 2
        assert len(r.json()["adverts"]) == 1

    def test_list_premium_first(self, client):
        first = self._create(client, job_title="First")["id"]
        second = self._create(client, job_title="Second")["id"]
        for advert_id in (first, second):
            client.post(f"/api/v1/adverts/{advert_id}/advertise")
        client.post(f"/api/v1/adverts/{first}/premium-upgrade")

        r = client.get("/api/v1/adverts?active=true")
        assert [a["id"] for a in r.json()["adverts"]] == [first, second]

    def test_state_selector(self, client, db):
        leeds = Location(name="Leeds", state="Yorkshire", lft=1, rgt=2)
        dover = Location(name="Dover", state="Kent", lft=3, rgt=4)
        canterbury = Location(name="Canterbury", state="Kent", lft=5, rgt=6)
        bath = Location(name="Bath", state="Avon", lft=7, rgt=8)
        db.add_all([leeds, dover, canterbury, bath])
        db.commit()

        for location in (leeds, dover, canterbury, bath):
            advert_id = self._create(client, location_ids=[location.id])["id"]
            client.post(f"/api/v1/adverts/{advert_id}/advertise")
        # Not live, so its state is not offered
        self._create(client, location_ids=[bath.id])

        r = client.get("/api/v1/adverts/states?selected=Kent")
        assert r.status_code == 200
        rows = r.json()["rows"]
        assert [[o["state"] for o in row] for row in rows] == [["Avon", "Kent", "Yorkshire"]]
        assert [o["state"] for o in rows[0] if o["selected"]] == ["Kent"]

        r = client.get(f"/api/v1/adverts?location_id={dover.id}")
        assert r.json()["total"] == 1

    def test_contact(self, client, db):
        owner = Advertiser(email="boss@depot.co.uk", forename="Bo", surname="Boss",
                           company_name="Depot Ltd", created_at=utcnow())
        db.add(owner)
        db.commit()

        own_id = self._create(client)["id"]
        r = client.get(f"/api/v1/adverts/{own_id}/contact")
        assert r.json()["email"] == "alex@example.co.uk"
        assert r.json()["source"] == "submitter"
        assert r.json()["company_name"] == ""

        owned_id = self._create(client, advertiser_id=owner.id)["id"]
        r = client.get(f"/api/v1/adverts/{owned_id}/contact")
        assert r.status_code == 200
        data = r.json()
        assert data["email"] == "boss@depot.co.uk"
        assert data["source"] == "advertiser"
        assert data["company_name"] == "Depot Ltd"
        assert data["last_posted_date"] is not None

    def test_short_url_falls_back_without_token(self, client):
        advert_id = self._create(client, job_title="Night Porter")["id"]
        r = client.get(f"/api/v1/adverts/{advert_id}/short-url")
        assert r.status_code == 200
        assert r.json()["url"].endswith(f"/adverts/{advert_id}-night-porter")

    def test_health(self, client):
        r = client.get("/health")
        assert r.json()["status"] == "ok"

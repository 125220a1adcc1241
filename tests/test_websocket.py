def _create(ws, **fields):
    ws.send_json({"type": "create", **fields})
    created = ws.receive_json()
    assert created["type"] == "created"
    return created


def _join(ws, code, nickname=None):
    ws.send_json({"type": "join", "roomCode": code, "nickname": nickname})
    return ws.receive_json()


def test_health_reports_active_rooms(client):
    assert client.get("/health").json() == {"status": "ok", "rooms": 0}
    with client.websocket_connect("/ws") as ws:
        _create(ws)
        assert client.get("/health").json()["rooms"] == 1


def test_create_join_and_lobby_listing(client):
    with client.websocket_connect("/ws") as host_ws, client.websocket_connect("/") as guest_ws:
        created = _create(host_ws, nickname="Riley", settings={"maxPlayers": 2})
        code = created["roomCode"]

        joined = _join(guest_ws, code, "Sam")
        assert joined["type"] == "joined"
        assert joined["isHost"] is False
        assert [p["nickname"] for p in joined["players"]] == ["Riley", "Sam"]

        notice = host_ws.receive_json()
        assert notice == {
            "type": "player_joined",
            "player": {"id": joined["playerId"], "nickname": "Sam", "ready": False},
        }

        listing = client.get("/rooms").json()
        assert listing == [
            {
                "roomCode": code,
                "hostId": created["playerId"],
                "hostNickname": "Riley",
                "playerCount": 2,
                "maxPlayers": 2,
                "mode": "infinite",
                "started": False,
            }
        ]
        assert client.get(f"/rooms/{code.lower()}").json()["roomCode"] == code


def test_unknown_room_lookup_is_404(client):
    assert client.get("/rooms/ZZZZZZ").status_code == 404


def test_join_errors_reach_only_the_requester(client):
    with client.websocket_connect("/ws") as ws:
        assert _join(ws, "ABCDEF") == {"type": "error", "code": "ROOM_NOT_FOUND", "msg": "ROOM NOT FOUND"}

        # The connection survives the rejection and can still create a room.
        created = _create(ws)
        assert created["isHost"] is True


def test_malformed_frames_are_ignored(client):
    with client.websocket_connect("/ws") as ws:
        created = _create(ws)
        ws.send_text("{not json")
        ws.send_bytes(b"\x00\x01")
        ws.send_json({"type": "warp", "to": "anywhere"})
        ws.send_json({"type": "pos", "x": "left"})
        ws.send_json({"type": "ready"})

        # The first reply after the junk is the ready broadcast.
        assert ws.receive_json() == {"type": "player_ready", "playerId": created["playerId"], "ready": True}
        assert ws.receive_json()["type"] == "game_start"


def test_binary_json_frames_are_accepted(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b'{"type": "create", "nickname": "bin"}')
        assert ws.receive_json()["players"][0]["nickname"] == "bin"


def test_three_player_game_flow(client):
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        code = _create(a)["roomCode"]
        _join(b, code)
        a.receive_json()  # player_joined

        with client.websocket_connect("/ws") as c:
            c_id = _join(c, code)["playerId"]
            a.receive_json()
            b.receive_json()

            c.send_json({"type": "ready"})
            for ws in (a, b, c):
                assert ws.receive_json()["type"] == "player_ready"
            b.send_json({"type": "ready"})
            for ws in (a, b, c):
                assert ws.receive_json()["type"] == "player_ready"
                assert ws.receive_json() == {"type": "game_start", "settings": {"mode": "infinite", "maxPlayers": 4}}

            # Late joiners are turned away once the game is running.
            with client.websocket_connect("/ws") as late:
                assert _join(late, code)["code"] == "GAME_ALREADY_STARTED"

            c.send_json({"type": "pos", "x": 1, "y": 2, "z": 3, "yaw": 0.5})
            assert a.receive_json() == {"type": "pos", "id": c_id, "x": 1.0, "y": 2.0, "z": 3.0, "yaw": 0.5}
            assert b.receive_json()["id"] == c_id

            c.send_json({"type": "hit", "netId": 8})
            assert a.receive_json() == {"type": "hit", "netId": 8, "shooterId": c_id}

        # c closed: everyone left hears about it.
        for ws in (a, b):
            assert ws.receive_json()["type"] == "player_left"


def test_host_disconnect_promotes_remaining_member(client):
    with client.websocket_connect("/ws") as guest:
        with client.websocket_connect("/ws") as host:
            created = _create(host)
            guest_id = _join(guest, created["roomCode"])["playerId"]
            host.receive_json()

        assert guest.receive_json() == {"type": "player_left", "id": created["playerId"]}
        assert guest.receive_json() == {"type": "new_host", "id": guest_id}

        guest.send_json({"type": "zombie_dead", "netId": 5})
        assert guest.receive_json() == {"type": "zombie_dead", "netId": 5}


def test_last_disconnect_frees_the_code(client):
    with client.websocket_connect("/ws") as host:
        code = _create(host)["roomCode"]

    with client.websocket_connect("/ws") as ws:
        assert _join(ws, code)["code"] == "ROOM_NOT_FOUND"
    assert client.get("/health").json()["rooms"] == 0

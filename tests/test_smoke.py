"""Smoke test to verify the toolchain works."""


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import route_hazards.analysis
    import route_hazards.geometry
    import route_hazards.reporting
    import route_hazards.scoring
    import route_hazards.storage

    assert route_hazards.geometry is not None
    assert route_hazards.scoring is not None
    assert route_hazards.storage is not None
    assert route_hazards.analysis is not None
    assert route_hazards.reporting is not None


def test_web_app_importable():
    from route_hazards.web.app import app

    assert app.title == "Route Visibility Hazards"

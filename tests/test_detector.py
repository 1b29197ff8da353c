from hostswitch.blocker.detector import detect_active, is_active
from hostswitch.profiles.store import UNSAFE_DEFAULT


def test_custom_when_nothing_matches(store, settings):
    assert detect_active(store, settings.hosts_path) is None


def test_detects_matching_profile(store, settings):
    settings.hosts_path.write_bytes(UNSAFE_DEFAULT)

    active = detect_active(store, settings.hosts_path)

    assert active is not None
    assert active.path == settings.unsafe_path
    assert active.is_unsafe


def test_identical_profiles_first_in_listing_wins(store, settings):
    body = b"0.0.0.0 twin.example\n"
    (settings.profiles_dir / "b-twin.hosts").write_bytes(body)
    (settings.profiles_dir / "a-twin.hosts").write_bytes(body)
    settings.hosts_path.write_bytes(body)

    results = {detect_active(store, settings.hosts_path).name for _ in range(5)}

    assert results == {"a-twin.hosts"}


def test_byte_level_comparison(store, settings):
    settings.hosts_path.write_bytes(UNSAFE_DEFAULT + b"\n")
    assert detect_active(store, settings.hosts_path) is None


def test_missing_live_file_is_custom(store, settings):
    settings.hosts_path.unlink()
    assert detect_active(store, settings.hosts_path) is None
    assert not is_active(settings.unsafe_path, settings.hosts_path)


def test_is_active(store, settings):
    settings.hosts_path.write_bytes(settings.safe_path.read_bytes())
    assert is_active(settings.safe_path, settings.hosts_path)
    assert not is_active(settings.unsafe_path, settings.hosts_path)

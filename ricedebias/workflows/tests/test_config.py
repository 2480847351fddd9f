import pytest

from ricedebias.denoise.noise_model import ConfigurationError
from ricedebias.workflows.config import load_config, merge_options


def test_load_config(tmp_path):
    config_file = tmp_path / "ricedebias.toml"
    config_file.write_text(
        "[ricedebias]\n"
        'mask = "mask.nii.gz"\n'
        "rician = 12.5\n"
        "maxdiff = 2.5e-3\n"
        "num_threads = 2\n"
    )
    options = load_config(config_file)
    assert options == {
        "mask": "mask.nii.gz",
        "rician": 12.5,
        "maxdiff": 2.5e-3,
        "num_threads": 2,
    }


def test_load_config_without_table(tmp_path):
    config_file = tmp_path / "other.toml"
    config_file.write_text('[other]\nkey = "value"\n')
    assert load_config(config_file) == {}


def test_load_config_errors(tmp_path):
    broken = tmp_path / "broken.toml"
    broken.write_text("[ricedebias\nmask = \n")
    with pytest.raises(ConfigurationError, match="Error decoding"):
        load_config(broken)

    unknown = tmp_path / "unknown.toml"
    unknown.write_text("[ricedebias]\nsigma = 3\n")
    with pytest.raises(ConfigurationError, match="Unknown keys"):
        load_config(unknown)

    not_table = tmp_path / "not_table.toml"
    not_table.write_text("ricedebias = 3\n")
    with pytest.raises(ConfigurationError, match="must be a table"):
        load_config(not_table)

    for line in ('num_threads = "4"', "chunk_size = 2.5", "num_threads = true"):
        typed = tmp_path / "typed.toml"
        typed.write_text(f"[ricedebias]\n{line}\n")
        with pytest.raises(ConfigurationError, match="must be an integer"):
            load_config(typed)

    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_merge_options():
    merged = merge_options(
        {"mask": "a.nii", "rician": 3.0},
        {"mask": None, "rician": "b.nii", "maxdiff": None},
    )
    assert merged == {"mask": "a.nii", "rician": "b.nii"}

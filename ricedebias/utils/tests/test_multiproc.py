from multiprocessing import cpu_count

import pytest

from ricedebias.utils.multiproc import determine_num_processes


def test_determine_num_processes():
    # Test that the correct number of effective num_processes is returned

    # 0 should raise an error
    with pytest.raises(ValueError):
        determine_num_processes(0)

    # A string should raise an error
    with pytest.raises(TypeError):
        determine_num_processes("0")

    # A floating point number should raise an error
    with pytest.raises(TypeError):
        determine_num_processes(1.5)

    # None should return the number of CPUs
    assert determine_num_processes(None) == cpu_count()

    # A positive number is returned unchanged
    assert determine_num_processes(3) == 3

    # -1 uses every available core
    assert determine_num_processes(-1) == cpu_count()

    # A large negative number never drops below one worker
    assert determine_num_processes(-cpu_count() - 10) == 1

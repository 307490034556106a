from nesemu.cpu_state import CpuState
from nesemu.status_register import StatusFlag


def test_default_state_is_cleared():
    state = CpuState()
    assert (state.acc, state.x_reg, state.y_reg, state.sp, state.pc) == (0, 0, 0, 0, 0)
    assert state.sr.value == 0
    assert state.page_boundary_crossed is False
    assert state.branch_taken is False


def test_copy_equals_original():
    state = CpuState(acc=0x95, x_reg=3, pc=0x8000)
    state.sr.set(StatusFlag.CARRY)
    assert state.copy() == state


def test_copy_is_independent():
    state = CpuState(acc=1)
    snapshot = state.copy()
    state.acc = 2
    state.sr.set(StatusFlag.ZERO)
    assert snapshot.acc == 1
    assert not snapshot.sr.get(StatusFlag.ZERO)


def test_states_do_not_share_status_register():
    first = CpuState()
    second = CpuState()
    first.sr.set(StatusFlag.NEGATIVE)
    assert not second.sr.get(StatusFlag.NEGATIVE)
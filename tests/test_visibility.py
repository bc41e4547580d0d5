from models import DataKind, GroupMembership, GroupRole, User, UserRole
from utils.visibility import check_visibility, visible_users


def _user(user_id, name, groups=(), role=UserRole.USER, **private):
    memberships = [
        GroupMembership(group_id=group_id, role=group_role) for group_id, group_role in groups
    ]
    return User(id=user_id, name=name, role=role, memberships=memberships, **private)


def test_owner_sees_and_edits_own_data():
    amina = _user(1, "Amina", private_progress=True)
    visibility = check_visibility(amina, amina, DataKind.PROGRESS)
    assert visibility.can_view and visibility.can_edit


def test_member_peer_cannot_see_private_data_but_referent_can():
    referent = _user(1, "Bilal", [(10, GroupRole.REFERENT)])
    owner = _user(2, "Amina", [(10, GroupRole.MEMBER)], private_progress=True)
    peer = _user(3, "Chafik", [(10, GroupRole.MEMBER)])

    by_referent = check_visibility(referent, owner, DataKind.PROGRESS)
    assert by_referent.can_view and by_referent.can_edit
    assert by_referent.is_private

    by_peer = check_visibility(peer, owner, DataKind.PROGRESS)
    assert not by_peer.can_view
    assert not by_peer.can_edit


def test_privacy_is_per_data_kind():
    owner = _user(2, "Amina", [(10, GroupRole.MEMBER)], private_progress=True)
    peer = _user(3, "Chafik", [(10, GroupRole.MEMBER)])
    attendance = check_visibility(peer, owner, DataKind.ATTENDANCE)
    assert attendance.can_view
    assert not attendance.can_edit


def test_no_shared_group_means_no_access():
    referent = _user(1, "Bilal", [(10, GroupRole.REFERENT)])
    stranger = _user(4, "Dounia", [(11, GroupRole.MEMBER)])
    visibility = check_visibility(referent, stranger, DataKind.STATS)
    assert not visibility.can_view
    assert not visibility.can_edit


def test_referent_role_only_counts_in_the_shared_group():
    viewer = _user(1, "Bilal", [(10, GroupRole.REFERENT), (11, GroupRole.MEMBER)])
    owner = _user(2, "Amina", [(11, GroupRole.MEMBER)], private_stats=True)
    visibility = check_visibility(viewer, owner, DataKind.STATS)
    assert not visibility.can_view


def test_group_admin_and_global_admin_have_full_access():
    group_admin = _user(1, "Bilal", [(10, GroupRole.ADMIN)])
    admin = _user(5, "Root", role=UserRole.ADMIN)
    owner = _user(2, "Amina", [(10, GroupRole.MEMBER)], private_evaluations=True)

    assert check_visibility(group_admin, owner, DataKind.EVALUATIONS).can_edit
    global_access = check_visibility(admin, owner, DataKind.EVALUATIONS)
    assert global_access.can_view and global_access.can_edit


def test_visible_users_lists_self_first_then_by_name():
    viewer = _user(3, "Chafik", [(10, GroupRole.MEMBER)])
    candidates = [
        _user(2, "zaynab", [(10, GroupRole.MEMBER)]),
        _user(4, "Amina", [(10, GroupRole.MEMBER)]),
        _user(5, "Hidden", [(10, GroupRole.MEMBER)], private_progress=True),
        _user(6, "Elsewhere", [(12, GroupRole.MEMBER)]),
        _user(3, "Chafik", [(10, GroupRole.MEMBER)]),
    ]
    listed = visible_users(viewer, candidates, DataKind.PROGRESS)
    assert [user.id for user in listed] == [3, 4, 2]
    assert listed[0].is_self and listed[0].can_edit
    assert not listed[1].can_edit

#
# Linkage field helpers
#
# A sub resource is linked to its parent through a "linkage" field of the parent:
# the field holds a single child id or a list of child ids.
# These helpers never modify the stored value, the nested handlers assign the result back
# (assigning a new list is required for the JSON column change to be detected)
#
from typing import Any, List


def linkage_ids(value: Any) -> List[Any]:
    """
    :param value: linkage field value: None, a single id or a list of ids
    :return: new list of ids
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def link_position(ids: List[Any], sub_id: Any) -> int:
    """
    :param ids: list of linked ids
    :param sub_id: id to look up
    :return: position of `sub_id` in `ids`, -1 if it isn't linked (0 is a valid position)
    """
    for position, linked_id in enumerate(ids):
        if str(linked_id) == str(sub_id):
            return position
    return -1


def append_link(value: Any, sub_id: Any) -> List[Any]:
    """
    :return: the linked ids with `sub_id` appended
    """
    ids = linkage_ids(value)
    ids.append(sub_id)
    return ids


def remove_link(value: Any, sub_id: Any) -> List[Any]:
    """
    :return: the linked ids without the first occurrence of `sub_id`
    """
    ids = linkage_ids(value)
    position = link_position(ids, sub_id)
    if position >= 0:
        del ids[position]
    return ids

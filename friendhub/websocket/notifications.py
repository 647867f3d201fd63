from typing import Any, Dict


def friend_apply_notification(apply_id: int, sender_id: int, sender_name: str, remark: str) -> Dict[str, Any]:
    """Уведомление о новой заявке в друзья."""
    return {
        'type': 'friend_apply',
        'title': 'Новая заявка в друзья',
        'message': f'{sender_name} хочет добавить вас в друзья',
        'apply_id': apply_id,
        'sender_id': sender_id,
        'sender_name': sender_name,
        'remark': remark,
    }


def friend_accepted_notification(apply_id: int, accepter_id: int, accepter_name: str) -> Dict[str, Any]:
    """Уведомление о принятии заявки."""
    return {
        'type': 'friend_accepted',
        'title': 'Заявка принята',
        'message': f'{accepter_name} принял вашу заявку в друзья',
        'apply_id': apply_id,
        'sender_id': accepter_id,
        'sender_name': accepter_name,
    }

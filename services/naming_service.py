"""
命名服務：生成 Lobby Code

純計算邏輯，不涉及狀態轉換
"""
import random
import string

LOBBY_CODE_LENGTH = 5


def generate_lobby_code() -> str:
    """
    生成隨機的 5 位大寫英數 Lobby 代碼

    範例：K3Z9A, 0QX2M

    注意：
    - 不檢查唯一性（由呼叫者負責）
    - 36^5 = 60,466,176 種可能，碰撞機率極低
    """
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=LOBBY_CODE_LENGTH))

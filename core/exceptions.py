"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理
"""


class BusinessSimException(Exception):
    """所有遊戲異常的基類"""
    pass


# ============ Lobby 相關異常 ============

class LobbyNotFound(BusinessSimException):
    """Lobby 不存在"""
    def __init__(self, lobby_code):
        self.lobby_code = lobby_code
        super().__init__(f"Lobby {lobby_code} not found")


class InvalidHostCredential(BusinessSimException):
    """建立 Lobby 時的 Host 密碼錯誤"""
    pass


# ============ Player 相關異常 ============

class PlayerNotFound(BusinessSimException):
    """公司（玩家）不存在"""
    def __init__(self, company_name):
        self.company_name = company_name
        super().__init__(f"Player {company_name} not found")


class NoPendingProduct(BusinessSimException):
    """審核佇列中沒有這間公司的產品"""
    def __init__(self, company_name):
        self.company_name = company_name
        super().__init__(f"No pending product for {company_name}")


# ============ 狀態轉換異常 ============

class InvalidStateTransition(BusinessSimException):
    """非法的狀態轉換"""
    pass


# ============ Estimator 相關異常 ============

class EstimatorError(BusinessSimException):
    """外部需求估算服務的錯誤（只會在回合結算內部被捕捉，不會傳到 client）"""
    pass


class EstimatorUnavailable(EstimatorError):
    """呼叫 LLM 失敗（網路錯誤、HTTP 錯誤、沒有 API key）"""
    pass


class MalformedEstimatorOutput(EstimatorError):
    """LLM 回傳的內容無法解析成預期的 JSON 結構"""
    pass

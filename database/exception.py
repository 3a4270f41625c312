"""
상태 저장소 관련 예외 클래스 정의
"""


class DatabaseError(Exception):
    """저장소 기본 예외"""
    pass


class UnknownStoreDriverError(DatabaseError):
    """지원하지 않는 저장소 드라이버"""
    def __init__(self, driver: str):
        self.driver = driver
        self.message = f"Unknown state store driver: {driver}"
        super().__init__(self.message)

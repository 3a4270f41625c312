"""잡 모듈 패키지 (하위 모듈은 worker.main._load_jobs()에서 로드)"""

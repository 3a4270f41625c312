"""cronark - cron 기반 단일 머신 백그라운드 잡 실행기"""

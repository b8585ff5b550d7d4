"""post-service 와 주변 서비스가 공유하는 공통 라이브러리."""

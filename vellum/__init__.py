"""Vellum: 선언형 필드 directive와 이미지 업로드를 지원하는 content 대시보드."""

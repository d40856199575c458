# views/__init__.py
# 알림 메시지와 Slack 블록을 만드는 뷰 패키지입니다.

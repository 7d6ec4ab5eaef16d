"""이메일 알림 발송 모듈.

모든 발송 함수는 실패하더라도 예외를 발생시키지 않고 False 를 반환합니다.
MAIL_ENABLED 가 꺼져 있으면 실제 발송 없이 로그만 남깁니다.
"""

import ssl
from email.message import EmailMessage
from typing import List

import aiosmtplib
import certifi

from app.config import Config, logger


async def send_email(email_to: List[str], subject: str, content: str) -> bool:
    """이메일을 발송합니다.

    Args:
        email_to (List[str]): 수신자 이메일 주소 리스트
        subject (str): 이메일 제목
        content (str): 이메일 본문

    Returns:
        bool: 발송 성공 여부
    """
    recipients = [email for email in email_to if email]
    if not recipients:
        return False

    if not Config.MAIL_ENABLED:
        logger.info("메일 발송 비활성화: to=%s subject=%s", recipients, subject)
        return True

    msg = EmailMessage()
    msg["From"] = f"{Config.MAIL_FROM_NAME} <{Config.MAIL_FROM}>"
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = subject
    msg.set_content(content)

    try:
        context = ssl.create_default_context(cafile=certifi.where())
        await aiosmtplib.send(
            msg,
            hostname=Config.SMTP_HOST,
            port=Config.SMTP_PORT,
            start_tls=True,
            username=Config.SMTP_USER or None,
            password=Config.SMTP_PASSWORD or None,
            tls_context=context,
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.warning("메일 발송 실패: to=%s subject=%s error=%s", recipients, subject, e)
        return False

    logger.info("메일 발송 완료: to=%s subject=%s", recipients, subject)
    return True


async def send_welcome_email(email: str, full_name: str) -> bool:
    """회원가입 완료 안내 메일"""
    content = (
        f"{full_name}님, 가챠스토어 관리자 회원가입이 완료되었습니다.\n\n"
        "슈퍼 관리자의 승인 후 로그인할 수 있습니다. 승인 결과는 메일로 안내드립니다."
    )
    return await send_email([email], "[가챠스토어] 회원가입이 완료되었습니다", content)


async def send_approval_email(email: str, full_name: str) -> bool:
    """관리자 계정 승인 안내 메일"""
    content = (
        f"{full_name}님, 관리자 계정이 승인되었습니다.\n\n"
        f"아래 주소에서 로그인할 수 있습니다.\n{Config.ADMIN_DASHBOARD_URL}"
    )
    return await send_email([email], "[가챠스토어] 계정이 승인되었습니다", content)


async def send_rejection_email(email: str, full_name: str, reason: str) -> bool:
    """관리자 계정 거절 안내 메일"""
    content = (
        f"{full_name}님, 관리자 계정 신청이 거절되었습니다.\n\n"
        f"사유: {reason}"
    )
    return await send_email([email], "[가챠스토어] 계정 신청이 거절되었습니다", content)


async def send_submission_result_email(
    email: str, shop_name: str, approved: bool, note: str | None = None
) -> bool:
    """매장 제보 검토 결과 안내 메일"""
    result = "승인" if approved else "거절"
    content = f"제보해주신 '{shop_name}' 매장이 {result}되었습니다."
    if note:
        content += f"\n\n검토 메모: {note}"
    return await send_email(
        [email], f"[가챠스토어] 매장 제보가 {result}되었습니다", content
    )

"""Rendered bodies for verification emails."""

from html import escape
from typing import Optional

CODE_SUBJECT = "【BUNGU SQUAD】大会エントリー確認コード"
LINK_SUBJECT = "BUNGU SQUAD - メール認証のお願い"


def _minutes(ttl_seconds: float) -> int:
    return max(1, int(ttl_seconds // 60))


def render_code_email(nickname: str, code: str, ttl_seconds: float = 300) -> str:
    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #2563eb;">BUNGU SQUAD 大会エントリー</h2>
  <p>こんにちは、{escape(nickname)}さん</p>
  <p>大会エントリーのための確認コードをお送りします。</p>
  <div style="background: #f3f4f6; padding: 20px; border-radius: 8px; text-align: center;">
    <div style="font-size: 32px; font-weight: bold; color: #2563eb; letter-spacing: 4px;">
      {escape(code)}
    </div>
  </div>
  <p style="color: #6b7280; font-size: 14px;">
    ※このコードは{_minutes(ttl_seconds)}分間有効です。<br>
    ※このメールに心当たりがない場合は、無視してください。
  </p>
</div>
"""


def render_link_email(
    nickname: str, link: str, tournament_id: Optional[str] = None, ttl_seconds: float = 86400
) -> str:
    hours = max(1, int(ttl_seconds // 3600))
    tournament = (
        f"<p><strong>大会ID:</strong> {escape(tournament_id)}</p>" if tournament_id else ""
    )
    return f"""
<div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif;">
  <h2 style="color: #D4A853;">BUNGU SQUAD メール認証</h2>
  <p><strong>{escape(nickname)}</strong>さん、</p>
  <p>BUNGU SQUADの大会エントリーにお申し込みいただき、ありがとうございます。</p>
  {tournament}
  <p>下記のリンクをクリックして、メール認証を完了してください：</p>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{escape(link, quote=True)}"
       style="background-color: #D4A853; color: white; padding: 15px 30px;
              text-decoration: none; border-radius: 5px; display: inline-block;">
      メール認証を完了する
    </a>
  </div>
  <p style="color: #666; font-size: 14px;">※ このリンクは{hours}時間で無効になります</p>
</div>
"""

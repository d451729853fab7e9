"""
send_sms.py - Send a template SMS through PolySms

Set the credentials referenced in config.example.yaml, then run:
    python examples/send_sms.py
"""

import asyncio
import logging
import os

from polysms import PolySms, SmsProvider, SmsRequest, configure_logging

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.example.yaml")


def show(label, result):
    if result.success:
        print(f"[{label}] sent via {result.provider} - RequestId: {result.request_id}, BizId: {result.biz_id}")
    else:
        print(
            f"[{label}] failed via {result.provider} - {result.error_code}: {result.error_message} "
            f"({result.friendly_message}, retryable={result.retryable})"
        )


async def main():
    configure_logging(logging.INFO)

    request = SmsRequest(
        phone_number="13800138000",
        template_id="SMS_001",
        sign_name="测试签名",
        template_params={"code": "123456", "name": "张三"},
    )

    async with PolySms(CONFIG_PATH) as sms:
        # 1. Default provider, failing over in priority order
        show("default", await sms.send(request))

        # 2. A specific provider by name
        show("Aliyun", await sms.send(request, "Aliyun"))

        # 3. A specific provider by enum
        show("Tencent", await sms.send(request, SmsProvider.TENCENT))

        # 4. Registered providers
        print("Available providers:", ", ".join(sms.service.list_available_providers()))


if __name__ == "__main__":
    asyncio.run(main())

"""Fee and receipt previews for OFT sends."""

from __future__ import annotations

from typing import Any

from .model import (
    MessagingFee,
    OFTFeeDetail,
    OFTLimit,
    OFTReceipt,
    QuoteResult,
    TransferParam,
)


def get_quote(
    client: Any,
    oft_address: str,
    param: TransferParam,
    pay_in_alt_token: bool = False,
) -> QuoteResult:
    """Query ``quoteSend`` and ``quoteOFT`` for the same ``param``.

    The two reads are independent snapshots of contract state and are not
    reconciled with each other. Results are never cached.
    """

    send_param = param.as_abi_tuple()
    native_fee, alt_fee = client.quote_send(oft_address, send_param, pay_in_alt_token)
    limit, fee_details, receipt = client.quote_oft(oft_address, send_param)

    min_amount, max_amount = limit
    amount_sent, amount_received = receipt
    return QuoteResult(
        messaging_fee=MessagingFee(native_fee=int(native_fee), alt_fee=int(alt_fee)),
        limit=OFTLimit(min_amount=int(min_amount), max_amount=int(max_amount)),
        fee_details=tuple(
            OFTFeeDetail(description=str(description), amount=int(fee_amount))
            for fee_amount, description in fee_details
        ),
        receipt=OFTReceipt(amount_sent=int(amount_sent), amount_received=int(amount_received)),
    )

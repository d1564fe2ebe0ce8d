from earnout_vault.sui.ledger import LedgerQueryAdapter


def test_reads_deal_record(ledger: LedgerQueryAdapter, deal_id: str) -> None:
    deal = ledger.get_deal(deal_id)

    assert deal.deal_id == deal_id
    assert deal.buyer
    assert ledger.verify_deal_participant(deal_id, deal.buyer) is True


def test_blob_references_are_well_formed(ledger: LedgerQueryAdapter, deal_id: str) -> None:
    references = ledger.get_deal_blob_references(deal_id)

    assert all(ref.blob_id for ref in references)
    assert all(ref.uploaded_at for ref in references)


def test_audit_records_belong_to_deal(ledger: LedgerQueryAdapter, deal_id: str) -> None:
    records = ledger.get_deal_audit_records(deal_id)

    assert all(record.deal_id == deal_id for record in records)

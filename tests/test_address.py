from cloney.address import is_contract_address


def test_accepts_well_formed_contract_address():
    assert is_contract_address("KT1GRSvLoikDsXujKgZPsGLX8k8VvR2Tq95b")


def test_rejects_malformed_addresses():
    assert not is_contract_address("test")
    # implicit account, not a contract
    assert not is_contract_address("tz1VSUr8wwNhLAzempoch5d6hLRiTh8Cjcjb")
    # wrong length
    assert not is_contract_address("KT1GRSvLoikDsXujKgZPsGLX8k8VvR2Tq95")
    # '0' and 'l' are outside the base58 alphabet
    assert not is_contract_address("KT1GRSvLoikDsXujKgZPsGLX8k8VvR2Tq950")
    assert not is_contract_address("KT1GRSvLoikDsXujKgZPsGLX8k8VvR2Tq95l")
    assert not is_contract_address(None)

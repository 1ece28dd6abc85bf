ACCOUNT = "0x1234567890123456789012345678901234567890"
OTHER = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
SPENDER = "0x9876543210987654321098765432109876543210"
ZERO = "0x0000000000000000000000000000000000000000"

DAI = "0x1D70D57ccD2798323232B2dD027B3aBcA5C00091"
USDC = "0xC891481A0AaC630F4D89744ccD2C7D2C4215FD47"

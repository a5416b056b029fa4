from django import forms


class ShippingAddressForm(forms.Form):
    firstName = forms.CharField(max_length=100)
    lastName = forms.CharField(max_length=100)
    street = forms.CharField(max_length=200)
    city = forms.CharField(max_length=100)
    postalCode = forms.CharField(max_length=16)
    provinceId = forms.IntegerField(min_value=1)
